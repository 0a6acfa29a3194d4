#!/usr/bin/env python3
"""
写入演示数据: demo-user + demo-workspace + 成员关系 (可重复执行)

使用方法:
    python scripts/seed_demo.py
"""

import sys
import os

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.core.database import Database
from app.models import User, Workspace, WorkspaceMember


def seed_demo(db: Session, settings: Settings) -> None:
    """Insert the demo user, workspace and membership unless they exist."""
    if db.get(User, settings.DEMO_USER_ID) is None:
        db.add(User(id=settings.DEMO_USER_ID, email=settings.DEMO_USER_EMAIL, display_name="Demo User"))

    if db.get(Workspace, settings.DEMO_WORKSPACE_ID) is None:
        db.add(Workspace(id=settings.DEMO_WORKSPACE_ID, name="Demo Workspace"))
    db.flush()

    member = db.scalars(
        select(WorkspaceMember).where(
            WorkspaceMember.workspace_id == settings.DEMO_WORKSPACE_ID,
            WorkspaceMember.user_id == settings.DEMO_USER_ID,
        )
    ).first()
    if member is None:
        db.add(WorkspaceMember(workspace_id=settings.DEMO_WORKSPACE_ID, user_id=settings.DEMO_USER_ID))

    db.commit()


def main():
    settings = get_settings()
    database = Database(settings)
    database.create_all()

    db = database.session()
    try:
        seed_demo(db, settings)
        print(f"✅ Seed complete: {settings.DEMO_USER_ID} + {settings.DEMO_WORKSPACE_ID} created.")
    except Exception as e:
        db.rollback()
        print(f"\n❌ 操作失败: {e}")
        sys.exit(1)
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    main()
