"""Typed resource hooks over the QuickHelp backend.

Every hook takes the session's ApiClient and QueryClient. Read hooks cache
their result under a query key; mutation hooks issue the write and, only once
it has succeeded, invalidate the keys whose data the write affects.
"""
import logging
from typing import Optional

from pydantic import TypeAdapter

from api import ApiClient, ApiError
from models import (
    AuthSession, Booking, Chat, Message, MessagePage, Provider,
    ProviderSearchPage, ProviderService, Review, UploadTarget, User,
)
from query import QueryClient
from schema import (
    CancelBookingData, CompleteBookingData, CreateBookingData, CreateReviewData,
    ForgotPasswordData, LoginCredentials, MarkAsReadData, ResendVerificationData,
    ResetPasswordData, SearchProvidersParams, SendMessageData, SignupData,
    UpdateBookingStatusData, UpdatePasswordData, UpdateProfileData,
    UpdateProviderData, UpdateReviewData, UploadUrlRequest,
)

logger = logging.getLogger(__name__)

bookings_adapter = TypeAdapter(list[Booking])
chats_adapter = TypeAdapter(list[Chat])
reviews_adapter = TypeAdapter(list[Review])
services_adapter = TypeAdapter(list[ProviderService])


def _status_query(status: Optional[str]) -> dict:
    return {"status": status} if status else {}


# --- Health ---

async def check_connection(api: ApiClient) -> dict:
    try:
        return await api.get("/health")
    except ApiError as e:
        logger.error("Failed to connect to backend: %s", e.message)
        raise


# --- Auth ---

async def login(api: ApiClient, data: LoginCredentials) -> AuthSession:
    return AuthSession.model_validate(await api.post("/auth/login", data.to_body()))

async def signup(api: ApiClient, data: SignupData) -> dict:
    return await api.post("/auth/signup", data.to_body())

async def forgot_password(api: ApiClient, data: ForgotPasswordData) -> dict:
    return await api.post("/auth/forgot-password", data.to_body())

async def reset_password(api: ApiClient, token: str, data: ResetPasswordData) -> dict:
    return await api.post(f"/auth/reset-password/{token}", data.to_body())

async def update_password(api: ApiClient, data: UpdatePasswordData) -> dict:
    return await api.patch("/auth/update-password", data.to_body())

async def verify_email(api: ApiClient, qc: QueryClient, token: str) -> Optional[dict]:
    return await qc.fetch_query(
        ("verify-email", token),
        lambda: api.get(f"/auth/verify-email/{token}"),
        enabled=bool(token),
    )

async def resend_verification_email(api: ApiClient, data: ResendVerificationData) -> dict:
    return await api.post("/auth/resend-verification", data.to_body())

async def logout(api: ApiClient, qc: QueryClient) -> dict:
    result = await api.post("/auth/logout")
    qc.clear()
    return result

async def refresh_token(api: ApiClient) -> dict:
    return await api.post("/auth/refresh-token")


# --- User ---

async def current_user(api: ApiClient, qc: QueryClient) -> User:
    async def fetch():
        return User.model_validate(await api.get("/users/me"))
    return await qc.fetch_query(("current-user",), fetch, retry=1)

async def user_profile(api: ApiClient, qc: QueryClient, user_id: str) -> Optional[User]:
    async def fetch():
        return User.model_validate(await api.get(f"/users/{user_id}"))
    return await qc.fetch_query(("user", user_id), fetch, enabled=bool(user_id))

async def update_profile(api: ApiClient, qc: QueryClient, data: UpdateProfileData) -> User:
    user = User.model_validate(await api.patch("/users/me", data.to_body()))
    qc.invalidate(("current-user",), ("user",))
    return user

async def change_password(api: ApiClient, data: UpdatePasswordData) -> dict:
    return await api.patch("/users/me/password", data.to_body())

async def update_profile_picture(api: ApiClient, qc: QueryClient, filename: str, content: bytes, content_type: str) -> dict:
    try:
        result = await api.upload("/users/me/avatar", [("file", (filename, content, content_type))])
    except ApiError as e:
        raise ApiError("Failed to upload profile picture", e.status_code, e.payload) from e
    qc.invalidate(("current-user",), ("user",))
    return result

async def delete_account(api: ApiClient, qc: QueryClient) -> dict:
    result = await api.delete("/users/me")
    qc.clear()
    return result

async def user_bookings_for(api: ApiClient, qc: QueryClient, user_id: str, status: Optional[str] = None) -> Optional[list[Booking]]:
    async def fetch():
        return bookings_adapter.validate_python(await api.get(f"/users/{user_id}/bookings", _status_query(status)))
    return await qc.fetch_query(("user-bookings", user_id, status), fetch, enabled=bool(user_id))


# --- Provider ---

async def current_provider(api: ApiClient, qc: QueryClient) -> Provider:
    async def fetch():
        return Provider.model_validate(await api.get("/providers/me"))
    return await qc.fetch_query(("provider", "me"), fetch)

async def provider(api: ApiClient, qc: QueryClient, provider_id: str) -> Optional[Provider]:
    async def fetch():
        return Provider.model_validate(await api.get(f"/providers/{provider_id}"))
    return await qc.fetch_query(("provider", provider_id), fetch, enabled=bool(provider_id))

async def update_provider(api: ApiClient, qc: QueryClient, data: UpdateProviderData) -> Provider:
    updated = Provider.model_validate(await api.patch("/providers/me", data.normalized().to_body()))
    qc.invalidate(("provider", updated.id), ("provider", "me"))
    return updated

async def upload_provider_documents(api: ApiClient, qc: QueryClient, files: list[tuple[str, bytes, str]], document_type: str) -> Provider:
    parts = [("documents", f) for f in files]
    updated = Provider.model_validate(await api.upload("/providers/me/documents", parts, {"type": document_type}))
    qc.invalidate(("provider", "me"))
    return updated

async def search_providers(api: ApiClient, qc: QueryClient, params: Optional[SearchProvidersParams] = None, cursor: Optional[str] = None) -> ProviderSearchPage:
    query = (params or SearchProvidersParams()).to_body()

    async def fetch():
        return ProviderSearchPage.model_validate(await api.get("/providers/search", {**query, "cursor": cursor}))
    return await qc.fetch_query(("providers", "search", query, cursor), fetch)

async def provider_services(api: ApiClient, qc: QueryClient, provider_id: str) -> Optional[list[ProviderService]]:
    async def fetch():
        return services_adapter.validate_python(await api.get(f"/providers/{provider_id}/services"))
    return await qc.fetch_query(("provider-services", provider_id), fetch, enabled=bool(provider_id))

async def toggle_provider_availability(api: ApiClient, qc: QueryClient, is_available: bool) -> Provider:
    updated = Provider.model_validate(await api.patch("/providers/me/availability", {"isAvailable": is_available}))
    qc.invalidate(("provider", "me"), ("providers", "search"))
    return updated

async def delete_provider_document(api: ApiClient, qc: QueryClient, document_id: str) -> dict:
    result = await api.delete(f"/providers/me/documents/{document_id}")
    qc.invalidate(("provider", "me"))
    return result


# --- Booking ---

def _invalidate_booking(qc: QueryClient, booking_id: str, *extra):
    qc.invalidate(("user-bookings",), ("provider-bookings",), ("booking", booking_id), *extra)

async def user_bookings(api: ApiClient, qc: QueryClient, status: Optional[str] = None) -> list[Booking]:
    async def fetch():
        return bookings_adapter.validate_python(await api.get("/users/me/bookings", _status_query(status)))
    return await qc.fetch_query(("user-bookings", status), fetch)

async def provider_bookings(api: ApiClient, qc: QueryClient, status: Optional[str] = None) -> list[Booking]:
    async def fetch():
        return bookings_adapter.validate_python(await api.get("/providers/me/bookings", _status_query(status)))
    return await qc.fetch_query(("provider-bookings", status), fetch)

async def booking(api: ApiClient, qc: QueryClient, booking_id: str) -> Optional[Booking]:
    async def fetch():
        return Booking.model_validate(await api.get(f"/bookings/{booking_id}"))
    return await qc.fetch_query(("booking", booking_id), fetch, enabled=bool(booking_id))

async def create_booking(api: ApiClient, qc: QueryClient, data: CreateBookingData) -> Booking:
    created = Booking.model_validate(await api.post("/bookings", data.to_body()))
    qc.invalidate(("user-bookings",), ("provider-bookings",))
    return created

async def update_booking_status(api: ApiClient, qc: QueryClient, booking_id: str, data: UpdateBookingStatusData) -> Booking:
    updated = Booking.model_validate(await api.patch(f"/bookings/{booking_id}/status", data.to_body()))
    _invalidate_booking(qc, booking_id, ("notifications",))
    return updated

async def cancel_booking(api: ApiClient, qc: QueryClient, booking_id: str, data: Optional[CancelBookingData] = None) -> Booking:
    body = (data or CancelBookingData()).to_body()
    updated = Booking.model_validate(await api.patch(f"/bookings/{booking_id}/cancel", body))
    _invalidate_booking(qc, booking_id, ("notifications",))
    return updated

async def complete_booking(api: ApiClient, qc: QueryClient, booking_id: str, data: CompleteBookingData) -> Booking:
    updated = Booking.model_validate(await api.post(f"/bookings/{booking_id}/complete", data.to_body()))
    _invalidate_booking(qc, booking_id, ("reviews",))
    return updated


# --- Chat ---

async def chats(api: ApiClient, qc: QueryClient) -> list[Chat]:
    async def fetch():
        return chats_adapter.validate_python(await api.get("/chats"))
    return await qc.fetch_query(("chats",), fetch)

async def chat_history(api: ApiClient, qc: QueryClient, booking_id: str, cursor: Optional[str] = None) -> Optional[MessagePage]:
    async def fetch():
        return MessagePage.model_validate(await api.get(f"/chats/{booking_id}/messages", {"cursor": cursor}))
    return await qc.fetch_query(("chat-history", booking_id, cursor), fetch, enabled=bool(booking_id))

async def send_message(api: ApiClient, qc: QueryClient, data: SendMessageData, file: Optional[tuple[str, bytes, str]] = None) -> Message:
    if file:
        form = {
            "bookingId": data.booking_id,
            "receiverId": data.receiver_id,
            "type": data.type.value,
            "content": data.content or None,
        }
        result = await api.upload("/chats/upload", [("file", file)], form)
    else:
        result = await api.post("/chats/messages", data.to_body())

    message = Message.model_validate(result)
    qc.invalidate(("chat-history", data.booking_id), ("chats",))
    return message

async def mark_as_read(api: ApiClient, qc: QueryClient, booking_id: str, data: MarkAsReadData) -> dict:
    result = await api.patch(f"/chats/{booking_id}/read", data.to_body())
    qc.invalidate(("chat-history", booking_id), ("chats",))
    return result

async def get_upload_url(api: ApiClient, data: UploadUrlRequest) -> UploadTarget:
    return UploadTarget.model_validate(await api.post("/chats/upload-url", data.to_body()))

async def upload_file(api: ApiClient, upload_url: str, content: bytes, content_type: str) -> None:
    await api.put_file(upload_url, content, content_type)


# --- Review ---

def _invalidate_reviews(qc: QueryClient, provider_id: Optional[str]):
    if provider_id:
        qc.invalidate(("reviews", "provider", provider_id), ("reviews", "user"), ("provider", provider_id))
    else:
        # Provider unknown, so every provider's review list may be affected
        qc.invalidate(("reviews", "provider"), ("reviews", "user"))

async def provider_reviews(api: ApiClient, qc: QueryClient, provider_id: str) -> Optional[list[Review]]:
    async def fetch():
        return reviews_adapter.validate_python(await api.get(f"/reviews/provider/{provider_id}"))
    return await qc.fetch_query(("reviews", "provider", provider_id), fetch, enabled=bool(provider_id))

async def user_reviews(api: ApiClient, qc: QueryClient, user_id: Optional[str] = None) -> list[Review]:
    endpoint = f"/reviews/user/{user_id}" if user_id else "/reviews/me"

    async def fetch():
        return reviews_adapter.validate_python(await api.get(endpoint))
    return await qc.fetch_query(("reviews", "user", user_id or "me"), fetch)

async def create_review(api: ApiClient, qc: QueryClient, data: CreateReviewData) -> Review:
    review = Review.model_validate(await api.post("/reviews", data.to_body()))
    _invalidate_reviews(qc, data.provider_id or review.provider_id)
    return review

async def update_review(api: ApiClient, qc: QueryClient, review_id: str, data: UpdateReviewData) -> Review:
    review = Review.model_validate(await api.patch(f"/reviews/{review_id}", data.to_body()))
    _invalidate_reviews(qc, review.provider_id)
    return review

async def delete_review(api: ApiClient, qc: QueryClient, review_id: str) -> dict:
    result = await api.delete(f"/reviews/{review_id}")
    _invalidate_reviews(qc, result.get("providerId"))
    return result
