import asyncio
import logging
import random
from typing import Literal, Optional
from urllib.parse import quote

from fastapi import BackgroundTasks, Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse

import client
import hooks
import pages
from api import ApiClient, ApiError
from client import drop_session, get_api_client, get_mock_store, get_query_client, get_token
from models import DocumentType
from pages import MockStore
from query import QueryClient
from schema import (
    BookAppointmentForm, CancelBookingData, ChatMessageForm, CompleteBookingData,
    CreateBookingData, ForgotPasswordData, ForgotPasswordForm, LoginCredentials,
    LoginForm, ResendVerificationData, ResendVerificationForm, ResetPasswordData,
    ResetPasswordForm, SignupData, SignupForm, VerifyEmailForm,
)
from utils import CODE_LENGTH, Cooldown, is_valid_code, normalize_code

logging.basicConfig(level=client.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="QuickHelp Web", docs_url="/api/docs", redoc_url="/api/redoc", openapi_url="/api/openapi.json")

resend_cooldown = Cooldown(client.RESEND_COOLDOWN)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    # Upstream failures surface with the server's message; no response at all is a bad gateway
    status_code = exc.status_code if exc.status_code and exc.status_code >= 400 else 502
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


def form_error(message: Optional[str]):
    if message:
        raise HTTPException(status_code=400, detail=message)


# --- Health ---

@app.get("/api/health")
async def health():
    return {"status": "ok"}

@app.get("/api/health/upstream")
async def upstream_health(api: ApiClient = Depends(get_api_client)):
    return {"status": "ok", "upstream": await hooks.check_connection(api)}


# --- Auth Pages ---

@app.post("/api/pages/login")
async def login(form: LoginForm, api: ApiClient = Depends(get_api_client)):
    # Blank fields never reach the backend
    form_error(pages.validate_login(form))

    session = await hooks.login(api, LoginCredentials(email=form.email, password=form.password))
    logger.info("Login succeeded for %s", form.email)
    return {
        "access_token": session.access_token,
        "user": session.user,
        "redirect": "/",
    }

@app.post("/api/pages/signup")
async def signup(form: SignupForm, api: ApiClient = Depends(get_api_client)):
    form_error(pages.validate_signup(form))

    data = SignupData(
        email=form.email,
        password=form.password,
        first_name=form.first_name,
        last_name=form.last_name,
        phone=form.phone or None,
        location=form.location or None,
        role=form.user_type,
    )
    result = await hooks.signup(api, data)
    return {
        "message": result.get("message"),
        "redirect": f"/verify-email?email={quote(form.email)}",
    }

@app.post("/api/pages/logout")
async def logout(api: ApiClient = Depends(get_api_client), qc: QueryClient = Depends(get_query_client), token: Optional[str] = Depends(get_token)):
    result = await hooks.logout(api, qc)
    drop_session(token)
    return {"message": result.get("message"), "redirect": "/login"}

@app.post("/api/pages/forgot-password")
async def forgot_password(form: ForgotPasswordForm, api: ApiClient = Depends(get_api_client)):
    form_error(pages.validate_forgot_password(form))

    result = await hooks.forgot_password(api, ForgotPasswordData(email=form.email))
    return {"submitted": True, "email": form.email, "message": result.get("message")}

@app.get("/api/pages/reset-password")
async def reset_password_page(token: Optional[str] = None, email: Optional[str] = None):
    return {
        "email": email or "your account",
        "has_token": bool(token),
        **pages.reset_form_state("", ""),
    }

@app.post("/api/pages/reset-password/state")
async def reset_password_state(form: ResetPasswordForm):
    return pages.reset_form_state(form.password, form.confirm_password)

@app.post("/api/pages/reset-password")
async def reset_password(form: ResetPasswordForm, api: ApiClient = Depends(get_api_client)):
    form_error(pages.validate_reset_password(form))

    result = await hooks.reset_password(api, form.token, ResetPasswordData(password=form.password))
    return {"success": True, "message": result.get("message"), "redirect": "/login"}

@app.get("/api/pages/verify-email")
async def verify_email_page(email: Optional[str] = None):
    return {
        "email": email or "your email",
        "code_length": CODE_LENGTH,
        "resend_cooldown": resend_cooldown.remaining(email) if email else 0,
    }

@app.post("/api/pages/verify-email")
async def verify_email(form: VerifyEmailForm, api: ApiClient = Depends(get_api_client), qc: QueryClient = Depends(get_query_client)):
    code = normalize_code(form.code)
    if not is_valid_code(code):
        raise HTTPException(status_code=400, detail=f"Please enter a valid {CODE_LENGTH}-digit code")

    try:
        result = await hooks.verify_email(api, qc, code)
    except ApiError as e:
        logger.info("Verification failed for %s: %s", form.email, e.message)
        raise HTTPException(status_code=400, detail="Invalid or expired verification code. Please try again.")

    return {"verified": True, "message": (result or {}).get("message"), "redirect": "/login"}

@app.post("/api/pages/verify-email/resend")
async def resend_verification(form: ResendVerificationForm, api: ApiClient = Depends(get_api_client)):
    remaining = resend_cooldown.remaining(form.email)
    if remaining:
        raise HTTPException(status_code=429, detail=f"Please wait {remaining} seconds before requesting a new code")

    try:
        await hooks.resend_verification_email(api, ResendVerificationData(email=form.email))
    except ApiError as e:
        raise HTTPException(status_code=e.status_code or 502, detail="Failed to resend verification email. Please try again.")

    resend_cooldown.start(form.email)
    return {"sent": True, "resend_cooldown": resend_cooldown.remaining(form.email)}


# --- Discovery Pages ---

@app.get("/api/pages/home")
async def home(q: str = "", location: str = "Nearby"):
    return pages.home_page(q, location)

@app.get("/api/pages/search")
async def search(q: str = "", active_filter: Literal["all", "services", "providers"] = Query("all", alias="filter")):
    return pages.search_page(q, active_filter)

@app.get("/api/pages/providers")
async def providers(
    category: Optional[str] = None,
    rating: float = Query(0, ge=0, le=5),
    distance: float = Query(pages.DEFAULT_DISTANCE, ge=1, le=50),
    available_now: bool = False,
):
    return pages.providers_page(category, rating, distance, available_now)

@app.post("/api/pages/providers/{provider_id}/contact")
async def contact_provider(provider_id: int):
    provider = pages.find_provider(provider_id)
    if not provider:
        raise HTTPException(status_code=404, detail="Provider not found")
    return {"toast": f"Contacting {provider.name}..."}


# --- Booking Pages ---

@app.get("/api/pages/book/{provider_id}")
async def book(provider_id: int, tab: Literal["details", "about", "reviews"] = "details", name: Optional[str] = None):
    return pages.book_page(provider_id, tab, name)

@app.post("/api/pages/book/{provider_id}")
async def book_appointment(provider_id: int, form: BookAppointmentForm):
    form_error(pages.validate_booking(form))

    # Stand-in for the booking API round trip
    await asyncio.sleep(client.BOOKING_CONFIRM_DELAY)
    logger.info("Booked provider %s on %s at %s", provider_id, form.selected_date, form.selected_time)
    return {
        "toast": "Appointment booked successfully!",
        "redirect": "/bookings/confirmation",
        "appointment": {"provider_id": provider_id, **form.model_dump()},
    }

@app.get("/api/pages/bookings")
async def bookings(
    role: Literal["user", "provider"] = "user",
    status: Optional[str] = None,
    api: ApiClient = Depends(get_api_client),
    qc: QueryClient = Depends(get_query_client),
):
    if role == "provider":
        items = await hooks.provider_bookings(api, qc, status)
    else:
        items = await hooks.user_bookings(api, qc, status)
    return {"role": role, "status": status, "bookings": items}

@app.post("/api/pages/bookings")
async def create_booking(data: CreateBookingData, api: ApiClient = Depends(get_api_client), qc: QueryClient = Depends(get_query_client)):
    booking = await hooks.create_booking(api, qc, data)
    return {"booking": booking, "toast": "Booking created"}

@app.post("/api/pages/bookings/{booking_id}/cancel")
async def cancel_booking(booking_id: str, data: Optional[CancelBookingData] = None, api: ApiClient = Depends(get_api_client), qc: QueryClient = Depends(get_query_client)):
    return {"booking": await hooks.cancel_booking(api, qc, booking_id, data)}

@app.post("/api/pages/bookings/{booking_id}/complete")
async def complete_booking(booking_id: str, data: CompleteBookingData, api: ApiClient = Depends(get_api_client), qc: QueryClient = Depends(get_query_client)):
    return {"booking": await hooks.complete_booking(api, qc, booking_id, data)}


# --- Chat Page ---

async def simulate_reply(store: MockStore, chat_id: str, delay: float):
    await asyncio.sleep(delay)
    pages.add_provider_reply(store, chat_id)

@app.get("/api/pages/chat")
async def chat(tab: Literal["all", "pending", "completed"] = "all", active_chat: Optional[str] = None, store: MockStore = Depends(get_mock_store)):
    if active_chat and not pages.find_chat(store, active_chat):
        raise HTTPException(status_code=404, detail="Chat not found")
    return pages.chat_page(store, tab, active_chat)

@app.post("/api/pages/chat/{chat_id}/messages")
async def send_chat_message(chat_id: str, form: ChatMessageForm, background_tasks: BackgroundTasks, store: MockStore = Depends(get_mock_store)):
    if not pages.find_chat(store, chat_id):
        raise HTTPException(status_code=404, detail="Chat not found")

    message = pages.send_chat_message(store, chat_id, form.text)
    if message:
        delay = random.uniform(client.CHAT_REPLY_MIN_DELAY, client.CHAT_REPLY_MAX_DELAY)
        background_tasks.add_task(simulate_reply, store, chat_id, delay)

    return {"message": message, "messages": pages.load_messages(store, chat_id)}


# --- Reviews / Notifications ---

@app.get("/api/pages/reviews")
async def reviews(
    active_filter: Literal["all", "5", "4", "3", "2", "1", "with-photos"] = Query("all", alias="filter"),
    q: str = "",
):
    return pages.reviews_page(active_filter, q)

@app.get("/api/pages/notifications")
async def notifications(
    active_filter: Literal["all", "unread", "messages", "payments", "reviews", "system"] = Query("all", alias="filter"),
    store: MockStore = Depends(get_mock_store),
):
    return pages.notifications_page(store, active_filter)

@app.post("/api/pages/notifications/read-all")
async def mark_all_notifications_read(store: MockStore = Depends(get_mock_store)):
    count = pages.mark_all_notifications_read(store)
    logger.info("Marked %d notifications as read", count)
    return {"updated": count}

@app.post("/api/pages/notifications/{notification_id}/read")
async def mark_notification_read(notification_id: str, store: MockStore = Depends(get_mock_store)):
    if not pages.mark_notification_read(store, notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"updated": 1}


# --- Profile Page ---

async def finish_verification(store: MockStore, delay: float):
    await asyncio.sleep(delay)
    pages.complete_verification(store)

@app.get("/api/pages/profile")
async def profile(user_type: Literal["user", "provider"] = "user", store: MockStore = Depends(get_mock_store)):
    return pages.profile_page(store, user_type)

@app.post("/api/pages/profile/verification")
async def start_verification(background_tasks: BackgroundTasks, user_type: Literal["user", "provider"] = "user", store: MockStore = Depends(get_mock_store)):
    if not store.is_verified:
        pages.start_verification(store)
        background_tasks.add_task(finish_verification, store, client.VERIFICATION_DELAY)
    return pages.profile_page(store, user_type)

@app.post("/api/pages/profile/avatar")
async def upload_avatar(file: UploadFile = File(...), api: ApiClient = Depends(get_api_client), qc: QueryClient = Depends(get_query_client)):
    content = await file.read()
    result = await hooks.update_profile_picture(api, qc, file.filename or "avatar", content, file.content_type or "application/octet-stream")
    return {"image_url": result.get("imageUrl")}

@app.post("/api/pages/profile/documents")
async def upload_documents(
    files: list[UploadFile] = File(...),
    document_type: DocumentType = Form(..., alias="type"),
    api: ApiClient = Depends(get_api_client),
    qc: QueryClient = Depends(get_query_client),
):
    parts = [(f.filename or "document", await f.read(), f.content_type or "application/octet-stream") for f in files]
    provider = await hooks.upload_provider_documents(api, qc, parts, document_type.value)
    return {"documents": provider.documents}

@app.delete("/api/pages/profile")
async def delete_account(api: ApiClient = Depends(get_api_client), qc: QueryClient = Depends(get_query_client), token: Optional[str] = Depends(get_token)):
    result = await hooks.delete_account(api, qc)
    drop_session(token)
    return {"message": result.get("message"), "redirect": "/"}


# --- Admin / Static Pages ---

@app.get("/api/pages/admin")
async def admin(
    tab: Literal["dashboard", "users", "jobs", "analytics", "moderation"] = "dashboard",
    q: str = "",
    page: int = Query(1, ge=1),
):
    return pages.admin_page(tab, q, page)

@app.get("/api/pages/help")
async def help_center(q: str = "", active: Optional[str] = None):
    return pages.help_page(q, active)

@app.get("/api/pages/rules")
async def rules(expanded: Optional[list[str]] = Query(None)):
    return pages.rules_page(expanded)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
