import logging
import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, Header

from api import ApiClient
from pages import MockStore
from query import QueryClient, QueryClientRegistry, SessionRegistry
from utils import bearer_token

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"

API_URL: str = os.environ.get("API_URL") or DEFAULT_API_URL
API_TIMEOUT = float(os.environ.get("API_TIMEOUT", "10"))
QUERY_STALE_TIME = float(os.environ.get("QUERY_STALE_TIME", "60"))
MAX_SESSIONS = int(os.environ.get("MAX_SESSIONS", "1000"))

# Simulated latencies for the mocked flows, in seconds
CHAT_REPLY_MIN_DELAY = float(os.environ.get("CHAT_REPLY_MIN_DELAY", "1"))
CHAT_REPLY_MAX_DELAY = float(os.environ.get("CHAT_REPLY_MAX_DELAY", "3"))
BOOKING_CONFIRM_DELAY = float(os.environ.get("BOOKING_CONFIRM_DELAY", "1.5"))
VERIFICATION_DELAY = float(os.environ.get("VERIFICATION_DELAY", "2"))
RESEND_COOLDOWN = float(os.environ.get("RESEND_COOLDOWN", "60"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

if not os.environ.get("API_URL"):
    logger.warning("API_URL not set in environment, falling back to %s", DEFAULT_API_URL)

query_clients = QueryClientRegistry(stale_time=QUERY_STALE_TIME, max_sessions=MAX_SESSIONS)
# Chat, notification and profile state for the mocked pages
mock_stores = SessionRegistry(MockStore, max_sessions=MAX_SESSIONS)


def get_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    return bearer_token(authorization)


async def get_api_client(token: Optional[str] = Depends(get_token)):
    client = ApiClient(API_URL, token=token, timeout=API_TIMEOUT)
    try:
        yield client
    finally:
        await client.aclose()


def get_query_client(token: Optional[str] = Depends(get_token)) -> QueryClient:
    return query_clients.get(token)


def get_mock_store(token: Optional[str] = Depends(get_token)) -> MockStore:
    return mock_stores.get(token)


def drop_session(token: Optional[str]):
    query_clients.drop(token)
    mock_stores.drop(token)
