# Models module
from app.models.user import User, Workspace, WorkspaceMember
from app.models.category import Category
from app.models.asset import Asset, AnalysisStatus

__all__ = ["User", "Workspace", "WorkspaceMember", "Category", "Asset", "AnalysisStatus"]
