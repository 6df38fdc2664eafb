from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    # Backend speaks camelCase; Python side reads snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Role(str, Enum):
    USER = "USER"
    PROVIDER = "PROVIDER"
    ADMIN = "ADMIN"


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


class MessageType(str, Enum):
    TEXT = "TEXT"
    IMAGE = "IMAGE"
    DOCUMENT = "DOCUMENT"


class DocumentType(str, Enum):
    ID = "ID"
    CERTIFICATE = "CERTIFICATE"
    PORTFOLIO = "PORTFOLIO"
    OTHER = "OTHER"


class UserSummary(ApiModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None


class User(ApiModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Role = Role.USER
    email_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProviderDocument(ApiModel):
    id: str
    type: DocumentType
    url: str
    verified: bool = False
    created_at: Optional[datetime] = None


class ProviderService(ApiModel):
    id: str
    title: str
    description: Optional[str] = None
    price: float = 0
    duration: Optional[int] = None # minutes
    category: Optional[str] = None
    is_active: bool = True


class Provider(ApiModel):
    id: str
    user_id: Optional[str] = None
    bio: Optional[str] = None
    profession: Optional[str] = None
    skills: list[str] = []
    experience: int = 0
    hourly_rate: Optional[float] = None
    is_available: bool = False
    rating: Optional[float] = None
    review_count: int = 0
    address: Optional[str] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    documents: list[ProviderDocument] = []
    services: list[ProviderService] = []
    user: Optional[UserSummary] = None


class ProviderSearchPage(ApiModel):
    providers: list[Provider] = []
    total: int = 0
    page: int = 1
    total_pages: int = 1
    next_cursor: Optional[str] = None


class BookingService(ApiModel):
    id: str
    title: Optional[str] = None
    price: Optional[float] = None


class Booking(ApiModel):
    id: str
    user_id: Optional[str] = None
    provider_id: Optional[str] = None
    service_id: Optional[str] = None
    status: BookingStatus = BookingStatus.PENDING
    scheduled_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    address: Optional[str] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    notes: Optional[str] = None
    price: Optional[float] = None
    cancellation_reason: Optional[str] = None
    user: Optional[UserSummary] = None
    service: Optional[BookingService] = None


class Message(ApiModel):
    id: str
    booking_id: str
    sender_id: Optional[str] = None
    content: str = ""
    type: MessageType = MessageType.TEXT
    media_url: Optional[str] = None
    read: bool = False
    created_at: Optional[datetime] = None
    sender: Optional[UserSummary] = None


class MessagePage(ApiModel):
    messages: list[Message] = []
    next_cursor: Optional[str] = None
    has_more: bool = False


class Chat(ApiModel):
    id: str
    booking_id: str
    participants: list[UserSummary] = []
    last_message: Optional[Message] = None
    unread_count: int = 0
    updated_at: Optional[datetime] = None


class Review(ApiModel):
    id: str
    booking_id: Optional[str] = None
    user_id: Optional[str] = None
    provider_id: Optional[str] = None
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


class UploadTarget(ApiModel):
    upload_url: str
    file_url: str
    key: str


class AuthSession(ApiModel):
    access_token: str
    user: Optional[User] = None


# --- Page view records ---

class SearchResult(BaseModel):
    id: int
    type: str # service | provider
    name: str
    category: str
    rating: float
    distance: Optional[str] = None
    href: Optional[str] = None


class ProviderCard(BaseModel):
    id: int
    name: str
    rating: float
    service: str
    distance: str
    rate: str
    available: bool
    experience: str

    @property
    def distance_km(self) -> float:
        return float(self.distance.split()[0])


class ChatThread(BaseModel):
    id: str
    provider_name: str
    provider_image: str
    last_message: str
    last_message_time: datetime
    unread_count: int = 0
    status: str # pending | accepted | on-the-way | completed | cancelled
    deadline: Optional[datetime] = None


class ChatMessage(BaseModel):
    id: str
    text: str
    sender: str # user | provider
    timestamp: datetime
    status: str = "sent" # sent | delivered | read
    type: str = "text"


class ReviewCard(BaseModel):
    id: str
    reviewer_name: str
    reviewer_image: str
    rating: int
    date: str
    review: str
    service: str
    is_verified: bool
    photos: list[str] = []


class NotificationItem(BaseModel):
    id: str
    title: str
    message: str
    type: str # message | payment | review | system
    read: bool
    time: str


class AdminUser(BaseModel):
    id: str
    name: str
    email: str
    type: str # user | provider
    status: str # active | suspended | pending
    rating: float
    jobs_completed: int
    last_active: str
    region: str


class AdminJob(BaseModel):
    id: str
    title: str
    status: str # pending | in-progress | completed | disputed
    user: str
    provider: str
    date: str
    amount: int
    category: str
