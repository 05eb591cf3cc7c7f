from fastapi import FastAPI

from routes.content import content_router

app = FastAPI()
app.include_router(content_router)


@app.get("/")
def get_root():
    return {"message": "Lesson Content API"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
