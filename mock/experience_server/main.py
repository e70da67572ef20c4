from datetime import date, datetime
from typing import Optional
from fastapi import FastAPI, HTTPException
from pathlib import Path
import json
import os

app = FastAPI(title="Mock Experience Server", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/experience_stub") if os.path.exists("/experience_stub") else Path(__file__).resolve().parents[1] / "experience_stub"


def load_user(user_id: str) -> dict:
    file = DATA_DIR / f"user_{user_id}.json"
    if not file.exists():
        raise HTTPException(status_code=404, detail="user not found")
    return json.loads(file.read_text())


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/users/{user_id}/experiences")
def get_experiences(user_id: str, start: Optional[date] = None, end: Optional[date] = None):
    experiences = load_user(user_id)["experiences"]
    if start is not None:
        experiences = [e for e in experiences if datetime.fromisoformat(e["timestamp"]).date() >= start]
    if end is not None:
        experiences = [e for e in experiences if datetime.fromisoformat(e["timestamp"]).date() < end]
    return {"experiences": experiences}


@app.get("/users/{user_id}/preferences")
def get_preferences(user_id: str):
    preferences = load_user(user_id).get("preferences")
    if preferences is None:
        raise HTTPException(status_code=404, detail="no preferences")
    return preferences
