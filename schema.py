from typing import Literal, Optional, Union

from pydantic import Field

from models import ApiModel, BookingStatus, MessageType


class Payload(ApiModel):
    def to_body(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Upstream request bodies ---

class LoginCredentials(Payload):
    email: str
    password: str

class SignupData(Payload):
    email: str
    password: str
    first_name: str
    last_name: str
    role: Optional[Literal["user", "provider"]] = None
    phone: Optional[str] = None
    location: Optional[str] = None

class ForgotPasswordData(Payload):
    email: str

class ResetPasswordData(Payload):
    password: str

class UpdatePasswordData(Payload):
    current_password: str
    new_password: str
    confirm_password: str

class ResendVerificationData(Payload):
    email: str

class UpdateProfileData(Payload):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

class UpdateProviderData(Payload):
    bio: Optional[str] = None
    profession: Optional[str] = None
    skills: Optional[Union[list[str], str]] = None
    experience: Optional[Union[int, str]] = None
    hourly_rate: Optional[Union[float, str]] = None
    is_available: Optional[Union[bool, str]] = None
    address: Optional[str] = None
    location_lat: Optional[Union[float, str]] = None
    location_lng: Optional[Union[float, str]] = None

    def normalized(self) -> "UpdateProviderData":
        """Coerce the string values an HTML form submits into the types the backend expects."""
        data = self.model_copy()
        if isinstance(data.skills, str):
            data.skills = [s.strip() for s in data.skills.split(",") if s.strip()]
        if isinstance(data.experience, str):
            data.experience = int(data.experience)
        if isinstance(data.hourly_rate, str):
            data.hourly_rate = float(data.hourly_rate)
        if isinstance(data.is_available, str):
            data.is_available = data.is_available == "true"
        if isinstance(data.location_lat, str):
            data.location_lat = float(data.location_lat)
        if isinstance(data.location_lng, str):
            data.location_lng = float(data.location_lng)
        return data

class SearchProvidersParams(Payload):
    query: Optional[str] = None
    profession: Optional[str] = None
    min_rating: Optional[float] = None
    max_rate: Optional[float] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius: Optional[float] = None # km
    page: Optional[int] = None
    limit: Optional[int] = None

class CreateBookingData(Payload):
    provider_id: str
    service_id: str
    scheduled_date: str
    end_date: Optional[str] = None
    address: str
    location_lat: float
    location_lng: float
    notes: Optional[str] = None
    price: float

class UpdateBookingStatusData(Payload):
    status: BookingStatus
    cancellation_reason: Optional[str] = None

class CancelBookingData(Payload):
    cancellation_reason: Optional[str] = None

class CompleteBookingData(Payload):
    rating: int = Field(ge=1, le=5)
    review: Optional[str] = None

class SendMessageData(Payload):
    booking_id: str
    receiver_id: str
    content: str = ""
    type: MessageType = MessageType.TEXT

class MarkAsReadData(Payload):
    message_ids: list[str]

class UploadUrlRequest(Payload):
    file_type: str
    file_size: int

class CreateReviewData(Payload):
    booking_id: str
    provider_id: Optional[str] = None
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None

class UpdateReviewData(Payload):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = None


# --- Page forms ---
# Fields default to empty so a blank form reaches the page's own validation
# instead of failing request parsing.

class LoginForm(Payload):
    email: str = ""
    password: str = ""

class SignupForm(Payload):
    user_type: Literal["user", "provider"] = "user"
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    password: str = ""
    confirm_password: str = ""

class ForgotPasswordForm(Payload):
    email: str = ""

class ResetPasswordForm(Payload):
    token: Optional[str] = None
    email: Optional[str] = None
    password: str = ""
    confirm_password: str = ""

class VerifyEmailForm(Payload):
    email: Optional[str] = None
    code: Union[list[str], str] = ""

class ResendVerificationForm(Payload):
    email: str

class BookAppointmentForm(Payload):
    selected_date: Optional[int] = None
    selected_time: Optional[str] = None
    service_needed: str = ""

class ChatMessageForm(Payload):
    text: str = ""
