from fastapi import FastAPI
from fastcal.api.public import router as public_router

app = FastAPI(title="fastcal public api")
app.include_router(public_router)
