"""Pydantic schemas for API request/response serialization."""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import date, datetime


# ---- Auth ----
class SignupRequest(BaseModel):
    email: str = ""
    password: str = ""
    name: str = ""

class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""

class GoogleLoginRequest(BaseModel):
    id_token: str = ""

class PasswordResetRequest(BaseModel):
    email: str = ""

class PasswordResetConfirm(BaseModel):
    uid: int = 0
    token: str = ""
    password: str = ""


# ---- User ----
class UserOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = ""
    register_code: Optional[str] = Field(None, alias="register")

    class Config:
        from_attributes = True
        populate_by_name = True

class RegisterLinkRequest(BaseModel):
    # "register" on the wire; the attribute name avoids BaseModel.register
    register_code: str = Field(..., max_length=64, alias="register")


# ---- Responses ----
class OkResponse(BaseModel):
    ok: bool = True

class SignupResponse(OkResponse):
    user: UserOut
    verify_link: str

class LoginResponse(OkResponse):
    user: UserOut
    email_verified: bool = False

class UserResponse(OkResponse):
    user: UserOut


# ---- Campaign ----
class CampaignCreate(BaseModel):
    title: str = ""
    description: Optional[str] = None
    deadline: Optional[date] = None

class CampaignOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    deadline: Optional[date] = None
    status: str

class CampaignListResponse(OkResponse):
    campaigns: List[CampaignOut]

class CreatedResponse(OkResponse):
    id: int


# ---- Idea ----
class IdeaCreate(BaseModel):
    title: str = ""
    description: str = ""
    campaign_id: Optional[int] = None

class IdeaUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None

class IdeaStatusUpdate(BaseModel):
    status: str = ""

class IdeaOut(BaseModel):
    id: int
    title: str
    description: str
    status: str
    score_ai: Optional[int] = None
    compat_ai: Optional[int] = None
    created_at: Optional[datetime] = None
    campaign_id: Optional[int] = None
    campaign: Optional[str] = None
    author_id: Optional[int] = None
    author_name: Optional[str] = None
    votes: int = 0

class IdeaCreatedResponse(CreatedResponse):
    score_ai: int
    compat_ai: int

class IdeaListResponse(OkResponse):
    ideas: List[IdeaOut]

class BoardColumn(BaseModel):
    status: str
    count: int
    ideas: List[IdeaOut]

class BoardResponse(OkResponse):
    columns: List[BoardColumn]


# ---- Comment ----
class CommentCreate(BaseModel):
    text: str = ""
    parent_id: Optional[int] = None

class CommentOut(BaseModel):
    id: int
    user_id: int
    author_name: Optional[str] = None
    text: str
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None

class IdeaDetailResponse(OkResponse):
    idea: IdeaOut
    comments: List[CommentOut]

class CommentListResponse(OkResponse):
    comments: List[CommentOut]


# ---- Votes ----
class VoteResponse(OkResponse):
    votes: int

class StatusResponse(OkResponse):
    status: str


# ---- Badges & stats ----
class BadgeOut(BaseModel):
    code: str
    label: str
    granted_at: Optional[datetime] = None

class BadgeListResponse(OkResponse):
    badges: List[BadgeOut]

class LeaderOut(BaseModel):
    id: int
    name: str
    ideas_count: int
    votes_received: int

class LeaderboardResponse(OkResponse):
    leaders: List[LeaderOut]

class DashboardResponse(OkResponse):
    kpis: Dict[str, Any]
    charts: Dict[str, List[Dict[str, Any]]]


# ---- Generic ----
class MessageResponse(OkResponse):
    message: str
