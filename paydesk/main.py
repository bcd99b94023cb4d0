from paydesk.config import get_settings
from paydesk.factory import create_app

# fails at start-up when SESSION_SECRET is missing
app = create_app()


def run():
    import uvicorn

    settings = get_settings()
    uvicorn.run("paydesk.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
