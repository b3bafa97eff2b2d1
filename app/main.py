import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI  # noqa: E402

from app.api.routes.quiz import router as quiz_router  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="Interview Quiz Generation API")


@app.get("/health", tags=["health"])
def health_check():
    return {"status": "ok"}


app.include_router(quiz_router)
