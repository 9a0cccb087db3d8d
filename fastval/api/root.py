from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/", include_in_schema=False)
def root(request: Request):
    # read from the running app
    return {
        "name": request.app.title,
        "version": request.app.version,
        "status": "ok",
        "docs": request.app.docs_url,
        "health": request.url_for("health").path,
    }
