import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    # 数据库统一存 naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)
