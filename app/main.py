import uvicorn
from .base import create_app
from .core import settings

app = create_app()

if __name__ == "__main__":
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.ENV == "local")
