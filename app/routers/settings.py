from fastapi import APIRouter, Form

from pantrix.config import get_setting, set_setting
from pantrix.core.ai_assistant import DEFAULT_MODEL

router = APIRouter(prefix="/settings", tags=["settings"])


def _settings() -> dict:
    key = get_setting("claude_api_key") or ""
    return {
        "key_set": bool(key),
        "masked_key": key[:8] + "..." if len(key) > 8 else "",
        "claude_model": get_setting("claude_model", DEFAULT_MODEL),
    }


@router.get("")
def settings_page():
    return _settings()


@router.post("")
def settings_save(claude_api_key: str = Form(""), claude_model: str = Form("")):
    if claude_api_key.strip():
        set_setting("claude_api_key", claude_api_key.strip())
    if claude_model.strip():
        set_setting("claude_model", claude_model.strip())
    return _settings()
