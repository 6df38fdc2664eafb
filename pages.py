"""View-models for the QuickHelp pages.

Each function takes the page's transient UI state (tab, filter, search text,
form fields) and returns what the page renders. Filtering and sorting only
ever touch the resident mock arrays in mock_data.
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote
from uuid import uuid4

import mock_data
from models import ChatMessage, ChatThread, ProviderCard
from schema import BookAppointmentForm, ForgotPasswordForm, LoginForm, ResetPasswordForm, SignupForm
from utils import (
    MIN_SIGNUP_PASSWORD_LENGTH, average_rating, can_submit_reset, format_date, initials,
    is_password_valid, is_valid_email, password_requirements, passwords_match,
)

logger = logging.getLogger(__name__)

SEARCH_FILTERS = [
    {"id": "all", "label": "All"},
    {"id": "services", "label": "Services"},
    {"id": "providers", "label": "Providers"},
]
RATING_OPTIONS = [0, 3, 4, 4.5]
DEFAULT_DISTANCE = 10
BOOK_TABS = ["details", "about", "reviews"]
CHAT_TABS = ["all", "pending", "completed"]
REVIEW_FILTERS = ["all", "5", "4", "3", "2", "1", "with-photos"]
NOTIFICATION_FILTERS = {
    "messages": "message",
    "payments": "payment",
    "reviews": "review",
    "system": "system",
}
ADMIN_TABS = ["dashboard", "users", "jobs", "analytics", "moderation"]
ADMIN_PAGE_SIZE = 10


class MockStore:
    """One session's state for the mocked pages (chat threads, notifications, profile)."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.chats: list[ChatThread] = mock_data.chat_threads()
        self.messages: dict[str, list[ChatMessage]] = {}
        self.notifications = mock_data.notifications()
        self.profile = mock_data.profile()
        self.is_verified = False


# --- Home / search / providers ---

def home_page(search_query: str = "", location: str = "Nearby") -> dict:
    return {
        "search_query": search_query,
        "location": location,
        "categories": mock_data.CATEGORIES,
        "top_providers": [{**p, "initial": initials(p["name"])} for p in mock_data.TOP_PROVIDERS],
    }


def search_href(result) -> str:
    if result.type == "provider":
        return f"/book/{result.id}?name={quote(result.name)}"
    return f"/providers?category={quote(result.category.lower())}"


def search_page(q: str = "", active_filter: str = "all") -> dict:
    needle = q.lower()
    results = []
    for item in mock_data.SEARCH_RESULTS:
        matches_search = needle in item.name.lower() or needle in item.category.lower()
        matches_filter = (
            active_filter == "all"
            or (active_filter == "services" and item.type == "service")
            or (active_filter == "providers" and item.type == "provider")
        )
        if matches_search and matches_filter:
            results.append(item.model_copy(update={"href": search_href(item)}))

    return {
        "query": q,
        "active_filter": active_filter,
        "filters": SEARCH_FILTERS,
        # No query yet means the page shows its search prompt instead of results
        "searched": bool(q),
        "results": results if q else [],
    }


def filter_providers(category: Optional[str] = None, rating: float = 0, distance: float = DEFAULT_DISTANCE, available_now: bool = False) -> list[ProviderCard]:
    filtered = list(mock_data.PROVIDERS)
    if category:
        filtered = [p for p in filtered if p.service.lower() == category.lower()]
    if rating > 0:
        filtered = [p for p in filtered if p.rating >= rating]
    filtered = [p for p in filtered if p.distance_km <= distance]
    if available_now:
        filtered = [p for p in filtered if p.available]
    return filtered


def providers_page(category: Optional[str] = None, rating: float = 0, distance: float = DEFAULT_DISTANCE, available_now: bool = False) -> dict:
    providers = filter_providers(category, rating, distance, available_now)
    return {
        "title": f"{category} Services" if category else "All Providers",
        "filters": {"rating": rating, "distance": distance, "available_now": available_now},
        "rating_options": RATING_OPTIONS,
        "providers": [
            {
                **p.model_dump(),
                "initial": initials(p.name),
                "can_book": p.available,
                "book_label": "Book Now" if p.available else "Not Available",
                "href": f"/book/{p.id}?name={quote(p.name)}",
            }
            for p in providers
        ],
    }


def find_provider(provider_id: int) -> Optional[ProviderCard]:
    return next((p for p in mock_data.PROVIDERS if p.id == provider_id), None)


# --- Booking ---

def book_page(provider_id: int, tab: str = "details", name: Optional[str] = None) -> dict:
    # Every provider id renders the same mock profile until the booking API is wired in
    provider = mock_data.BOOKING_PROVIDER
    reviews = provider["reviews"]
    return {
        "provider_id": provider_id,
        "provider_name": name or provider["name"],
        "provider": provider,
        "average_rating": average_rating(r["rating"] for r in reviews),
        "review_count": len(reviews),
        "active_tab": tab,
        "tabs": BOOK_TABS,
        "available_dates": [d for d in provider["availability"] if d["available"]],
        "time_slots": provider["time_slots"],
    }


def validate_booking(form: BookAppointmentForm) -> Optional[str]:
    if not form.selected_date or not form.selected_time:
        return "Please select date and time"

    available = {int(d["date"]) for d in mock_data.BOOKING_PROVIDER["availability"] if d["available"]}
    if form.selected_date not in available:
        return "Selected date is not available"
    if form.selected_time not in mock_data.BOOKING_PROVIDER["time_slots"]:
        return "Selected time is not available"
    return None


# --- Chat ---

def sort_chats(chats: list[ChatThread]) -> list[ChatThread]:
    """Chats with a deadline first (soonest first), then the rest by most recent message."""
    def sort_key(chat: ChatThread):
        if chat.deadline is not None:
            return (0, chat.deadline.timestamp())
        return (1, -chat.last_message_time.timestamp())
    return sorted(chats, key=sort_key)


def find_chat(store: MockStore, chat_id: str) -> Optional[ChatThread]:
    return next((c for c in store.chats if c.id == chat_id), None)


def load_messages(store: MockStore, chat_id: str) -> list[ChatMessage]:
    if chat_id not in store.messages:
        store.messages[chat_id] = mock_data.chat_messages()
    return store.messages[chat_id]


def chat_page(store: MockStore, tab: str = "all", active_chat: Optional[str] = None) -> dict:
    chats = [c for c in store.chats if tab == "all" or c.status == tab]
    return {
        "active_tab": tab,
        "tabs": CHAT_TABS,
        "chats": sort_chats(chats),
        "active_chat": active_chat,
        "messages": load_messages(store, active_chat) if active_chat else [],
    }


def send_chat_message(store: MockStore, chat_id: str, text: str) -> Optional[ChatMessage]:
    if text.strip() == "":
        return None

    message = ChatMessage(id=uuid4().hex, text=text, sender="user",
                          timestamp=datetime.now(timezone.utc), status="sent")
    load_messages(store, chat_id).append(message)
    return message


def add_provider_reply(store: MockStore, chat_id: str) -> ChatMessage:
    reply = ChatMessage(id=uuid4().hex, text=mock_data.CHAT_REPLY_TEXT, sender="provider",
                        timestamp=datetime.now(timezone.utc), status="delivered")
    load_messages(store, chat_id).append(reply)
    logger.debug("Simulated reply in chat %s", chat_id)
    return reply


# --- Reviews ---

def reviews_page(active_filter: str = "all", q: str = "") -> dict:
    reviews = mock_data.REVIEWS

    def keep(review) -> bool:
        if active_filter == "with-photos":
            if not review.photos:
                return False
        elif active_filter != "all":
            if review.rating != int(active_filter):
                return False
        if q:
            needle = q.lower()
            return (
                needle in review.reviewer_name.lower()
                or needle in review.review.lower()
                or needle in review.service.lower()
            )
        return True

    counts = {star: sum(1 for r in reviews if r.rating == star) for star in (5, 4, 3, 2, 1)}
    total = len(reviews)
    return {
        "active_filter": active_filter,
        "filters": REVIEW_FILTERS,
        "search_query": q,
        "average_rating": f"{average_rating(r.rating for r in reviews):.1f}",
        "total_reviews": total,
        "rating_counts": counts,
        "rating_percentages": {star: (count / total * 100 if total else 0) for star, count in counts.items()},
        "reviews": [
            {**r.model_dump(), "display_date": format_date(r.date), "stars": [i < r.rating for i in range(5)]}
            for r in reviews if keep(r)
        ],
    }


# --- Notifications ---

def notifications_page(store: MockStore, active_filter: str = "all") -> dict:
    def keep(n) -> bool:
        if active_filter == "unread":
            return not n.read
        if active_filter in NOTIFICATION_FILTERS:
            return n.type == NOTIFICATION_FILTERS[active_filter]
        return True

    return {
        "active_filter": active_filter,
        "filters": ["all", "unread", *NOTIFICATION_FILTERS],
        "unread_count": sum(1 for n in store.notifications if not n.read),
        "notifications": [n for n in store.notifications if keep(n)],
    }


def mark_notification_read(store: MockStore, notification_id: str) -> bool:
    for n in store.notifications:
        if n.id == notification_id:
            n.read = True
            return True
    return False


def mark_all_notifications_read(store: MockStore) -> int:
    count = 0
    for n in store.notifications:
        if not n.read:
            n.read = True
            count += 1
    return count


# --- Profile ---

def trust_label(score: int) -> str:
    if score >= 90:
        return "Elite Trusted"
    if score >= 75:
        return "Highly Trusted"
    if score >= 50:
        return "Trusted"
    return "New Member"


def trust_message(score: int, user_type: str) -> str:
    if user_type == "provider":
        if score >= 90:
            return "Top-rated provider! Keep up the great work!"
        if score >= 75:
            return "Great job! You're a trusted provider."
        return "Complete your profile to increase visibility."
    if score >= 90:
        return "You're a valued member of our community!"
    return "Complete verification to unlock more features."


VERIFICATION_BADGES = {
    "verified": "Verified",
    "pending": "Under Review",
    "rejected": "Verification Needed",
}


def profile_page(store: MockStore, user_type: str = "user") -> dict:
    overrides = mock_data.PROVIDER_PROFILE if user_type == "provider" else mock_data.USER_PROFILE
    profile = {**store.profile, **overrides}
    # Providers start at 100, users at 50; completed verification lifts both to 100
    if store.is_verified or user_type == "provider":
        score = 100
    else:
        score = 50
    return {
        "user_type": user_type,
        "profile": profile,
        "is_verified": store.is_verified,
        "verification_badge": VERIFICATION_BADGES.get(profile["verification_status"]),
        "trust_score": score,
        "trust_label": trust_label(score),
        "trust_message": trust_message(score, user_type),
        "score_label": "Provider Score" if user_type == "provider" else "User Score",
        "badges": mock_data.BADGES,
    }


def start_verification(store: MockStore):
    store.profile["verification_status"] = "pending"


def complete_verification(store: MockStore):
    store.profile["verification_status"] = "verified"
    store.is_verified = True


# --- Admin ---

def admin_page(tab: str = "dashboard", q: str = "", page: int = 1) -> dict:
    view = {"active_tab": tab, "tabs": ADMIN_TABS}

    if tab == "dashboard":
        view["stats"] = mock_data.ADMIN_STATS
        view["recent_activities"] = mock_data.ADMIN_ACTIVITIES
        view["top_categories"] = [
            {**c, "bar_width": min(100, c["jobs"] / 250 * 100)} for c in mock_data.ADMIN_TOP_CATEGORIES
        ]
    elif tab == "users":
        needle = q.lower()
        users = [
            u for u in mock_data.ADMIN_USERS
            if not needle or needle in u.name.lower() or needle in u.email.lower() or needle in u.region.lower()
        ]
        total_pages = max(1, -(-len(users) // ADMIN_PAGE_SIZE))
        page = min(max(1, page), total_pages)
        start = (page - 1) * ADMIN_PAGE_SIZE
        view["search_query"] = q
        view["users"] = users[start:start + ADMIN_PAGE_SIZE]
        view["page"] = page
        view["total_pages"] = total_pages
    else:
        title, description = mock_data.ADMIN_PLACEHOLDERS[tab]
        view["title"] = title
        view["description"] = description
        if tab == "jobs":
            view["jobs"] = mock_data.ADMIN_JOBS
    return view


# --- Help / rules ---

def help_page(q: str = "", active: Optional[str] = None) -> dict:
    needle = q.lower()
    items = [
        item for item in mock_data.FAQ_ITEMS
        if not needle
        or needle in item["question"].lower()
        or any(needle in line.lower() for line in item["answer"])
    ]
    return {
        "search_query": q,
        "items": [{**item, "expanded": item["id"] == active} for item in items],
    }


def rules_page(expanded: Optional[list[str]] = None) -> dict:
    open_sections = set(expanded) if expanded is not None else mock_data.DEFAULT_EXPANDED_RULES
    return {
        "sections": [{**s, "expanded": s["id"] in open_sections} for s in mock_data.RULE_SECTIONS],
    }


# --- Auth forms ---

def validate_login(form: LoginForm) -> Optional[str]:
    if not form.email or not form.password:
        return "Please enter both email and password"
    return None


def validate_signup(form: SignupForm) -> Optional[str]:
    if form.password != form.confirm_password:
        return "Passwords do not match"
    if len(form.password) < MIN_SIGNUP_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_SIGNUP_PASSWORD_LENGTH} characters"
    return None


def validate_forgot_password(form: ForgotPasswordForm) -> Optional[str]:
    if not form.email:
        return "Please enter your email address"
    if not is_valid_email(form.email):
        return "Please enter a valid email address"
    return None


def reset_form_state(password: str, confirm_password: str) -> dict:
    requirements = password_requirements(password)
    return {
        "requirements": requirements,
        "passwords_match": passwords_match(password, confirm_password),
        "can_submit": can_submit_reset(password, confirm_password),
    }


def validate_reset_password(form: ResetPasswordForm) -> Optional[str]:
    if not form.token:
        return "Invalid or expired reset link. Please request a new one."
    if not is_password_valid(form.password):
        return "Please ensure your password meets all requirements."
    if not passwords_match(form.password, form.confirm_password):
        return "Passwords do not match."
    return None
