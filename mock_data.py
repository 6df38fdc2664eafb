from datetime import datetime, timedelta, timezone
from typing import Optional

from models import (
    AdminJob, AdminUser, ChatMessage, ChatThread, NotificationItem,
    ProviderCard, ReviewCard, SearchResult,
)

CATEGORIES = [
    {"id": 1, "name": "Plumbing", "icon": "🔧"},
    {"id": 2, "name": "Electrical", "icon": "💡"},
    {"id": 3, "name": "Cleaning", "icon": "🧹"},
    {"id": 4, "name": "Carpentry", "icon": "🔨"},
    {"id": 5, "name": "Painting", "icon": "🎨"},
    {"id": 6, "name": "Gardening", "icon": "🌿"},
    {"id": 7, "name": "Moving", "icon": "🚚"},
    {"id": 8, "name": "More", "icon": "➕"},
]

TOP_PROVIDERS = [
    {"id": 1, "name": "John D.", "rating": 4.9, "service": "Plumbing", "distance": "0.5 km"},
    {"id": 2, "name": "Sarah M.", "rating": 4.8, "service": "Cleaning", "distance": "1.2 km"},
    {"id": 3, "name": "Mike T.", "rating": 4.7, "service": "Electrical", "distance": "0.8 km"},
]

SEARCH_RESULTS = [
    SearchResult(id=1, type="service", name="Plumbing Services", category="Plumbing", rating=4.8),
    SearchResult(id=2, type="provider", name="John D.", category="Plumbing", rating=4.9, distance="0.5 km"),
    SearchResult(id=3, type="service", name="House Cleaning", category="Cleaning", rating=4.7),
    SearchResult(id=4, type="provider", name="Sarah M.", category="Cleaning", rating=4.8, distance="1.2 km"),
    SearchResult(id=5, type="service", name="Electrical Repairs", category="Electrical", rating=4.6),
    SearchResult(id=6, type="provider", name="Mike T.", category="Electrical", rating=4.7, distance="0.8 km"),
]

PROVIDERS = [
    ProviderCard(id=1, name="John D.", rating=4.9, service="Plumbing", distance="0.5 km", rate="$25/hr", available=True, experience="5 years"),
    ProviderCard(id=2, name="Sarah M.", rating=4.8, service="Cleaning", distance="1.2 km", rate="$20/hr", available=True, experience="3 years"),
    ProviderCard(id=3, name="Mike T.", rating=4.7, service="Electrical", distance="0.8 km", rate="$30/hr", available=False, experience="7 years"),
    ProviderCard(id=4, name="Alex K.", rating=4.9, service="Plumbing", distance="1.5 km", rate="$28/hr", available=True, experience="4 years"),
    ProviderCard(id=5, name="Emma W.", rating=4.6, service="Cleaning", distance="2.1 km", rate="$22/hr", available=True, experience="2 years"),
    ProviderCard(id=6, name="David L.", rating=4.8, service="Electrical", distance="1.8 km", rate="$35/hr", available=True, experience="6 years"),
]

BOOKING_PROVIDER = {
    "id": 1,
    "name": "John D.",
    "rating": 4.9,
    "service": "Plumbing",
    "distance": "0.5 km away",
    "rate": "$25/hr",
    "experience": "5 years",
    "completed_jobs": 247,
    "about": "Professional plumber with 5 years of experience in residential and commercial plumbing. "
             "Specialized in pipe repairs, installations, and maintenance.",
    "availability": [
        {"day": "Mon", "date": "16", "available": True},
        {"day": "Tue", "date": "17", "available": True},
        {"day": "Wed", "date": "18", "available": True},
        {"day": "Thu", "date": "19", "available": False},
        {"day": "Fri", "date": "20", "available": True},
        {"day": "Sat", "date": "21", "available": False},
        {"day": "Sun", "date": "22", "available": False},
    ],
    "time_slots": ["09:00 AM", "10:00 AM", "11:00 AM", "01:00 PM", "02:00 PM", "03:00 PM", "04:00 PM"],
    "reviews": [
        {"id": 1, "author": "Michael S.", "rating": 5, "comment": "Great service! Fixed my leaking pipe in no time.", "date": "2 days ago"},
        {"id": 2, "author": "Sarah L.", "rating": 5, "comment": "Professional and on time. Would definitely recommend!", "date": "1 week ago"},
        {"id": 3, "author": "David K.", "rating": 4, "comment": "Good work, but was 15 minutes late.", "date": "2 weeks ago"},
    ],
}

CHAT_REPLY_TEXT = "Thanks for your message! I'll get back to you shortly."


def chat_threads(now: Optional[datetime] = None) -> list[ChatThread]:
    now = now or datetime.now(timezone.utc)
    return [
        ChatThread(id="1", provider_name="John Plumbing", provider_image="J",
                   last_message="I can be there in 30 minutes",
                   last_message_time=now - timedelta(minutes=5), unread_count=2, status="accepted"),
        ChatThread(id="2", provider_name="Sarah Electrical", provider_image="S",
                   last_message="What time works for you tomorrow?",
                   last_message_time=now - timedelta(hours=1), status="pending",
                   deadline=now + timedelta(hours=24)),
        ChatThread(id="3", provider_name="Mike Cleaning", provider_image="M",
                   last_message="Thank you for your business!",
                   last_message_time=now - timedelta(days=1), status="completed"),
    ]


def chat_messages(now: Optional[datetime] = None) -> list[ChatMessage]:
    now = now or datetime.now(timezone.utc)
    return [
        ChatMessage(id="1", text="Hi there! I need help with a plumbing issue.", sender="user",
                    timestamp=now - timedelta(minutes=30), status="read"),
        ChatMessage(id="2", text="Hello! I can help with that. What seems to be the problem?", sender="provider",
                    timestamp=now - timedelta(minutes=25), status="read"),
        ChatMessage(id="3", text="My kitchen sink is clogged and water is not draining properly.", sender="user",
                    timestamp=now - timedelta(minutes=20), status="read"),
        ChatMessage(id="4", text="I can be there in 30 minutes. Does that work for you?", sender="provider",
                    timestamp=now - timedelta(minutes=5), status="read"),
    ]


REVIEWS = [
    ReviewCard(id="1", reviewer_name="Alex Johnson", reviewer_image="AJ", rating=5, date="2023-10-05",
               review="Excellent service! The plumber arrived on time and fixed the issue quickly. Very professional and knowledgeable.",
               service="Plumbing - Leaky Faucet", is_verified=True, photos=["/reviews/leaky-faucet-after.jpg"]),
    ReviewCard(id="2", reviewer_name="Sarah Williams", reviewer_image="SW", rating=4, date="2023-10-03",
               review="Good service overall. The electrician was professional but arrived 15 minutes late.",
               service="Electrical - Outlet Installation", is_verified=True),
    ReviewCard(id="3", reviewer_name="Michael Brown", reviewer_image="MB", rating=5, date="2023-09-28",
               review="Outstanding work! The cleaner left my apartment spotless. Will definitely book again.",
               service="Cleaning - Deep Cleaning", is_verified=False),
    ReviewCard(id="4", reviewer_name="Emily Davis", reviewer_image="ED", rating=3, date="2023-09-25",
               review="The service was okay. The technician was skilled but the job took longer than expected.",
               service="AC Repair", is_verified=True),
    ReviewCard(id="5", reviewer_name="David Wilson", reviewer_image="DW", rating=5, date="2023-09-20",
               review="Amazing job! The carpenter did exactly what I wanted and even gave me some great suggestions.",
               service="Carpentry - Bookshelf Installation", is_verified=True),
]


def notifications() -> list[NotificationItem]:
    return [
        NotificationItem(id="1", title="New Message", message="You have a new message from John about your booking",
                         type="message", read=False, time="5 min ago"),
        NotificationItem(id="2", title="Payment Received", message="Your payment of ₦15,000 for Plumbing Service has been received",
                         type="payment", read=True, time="2 hours ago"),
        NotificationItem(id="3", title="New Review", message="You received a 5-star review from Jane Smith",
                         type="review", read=False, time="1 day ago"),
        NotificationItem(id="4", title="System Update", message="New features have been added to your dashboard",
                         type="system", read=True, time="2 days ago"),
    ]


def profile() -> dict:
    return {
        "name": "John Doe",
        "email": "john@example.com",
        "location": "Lagos, Nigeria",
        "join_date": "Joined January 2023",
        "rating": 4.8,
        "reviews": 42,
        "is_provider": False,
        "services": [],
        "availability": "",
        "max_jobs_per_day": 0,
        "max_jobs_per_week": 0,
        "help_points": 120,
        "referrals": 5,
        "verification_status": "not_started",
        "business_hours": {"open": "09:00", "close": "18:00", "days": ["Mon", "Tue", "Wed", "Thu", "Fri"]},
        "social_links": {"website": "mybusiness.com", "instagram": "@mybusiness", "tiktok": "@mybusiness"},
        "gallery": {"images": ["/placeholder-image.jpg"] * 3, "video": "/placeholder-video.mp4"},
    }


PROVIDER_PROFILE = {
    "is_provider": True,
    "services": ["Plumbing", "Electrical"],
    "availability": "Available Today",
    "max_jobs_per_day": 5,
    "max_jobs_per_week": 20,
}

USER_PROFILE = {
    "is_provider": False,
    "services": [],
    "availability": "",
    "max_jobs_per_day": 0,
    "max_jobs_per_week": 0,
}

BADGES = ["On-Time Star", "5-Star Streak", "Quick Responder"]

ADMIN_STATS = [
    {"name": "Total Users", "value": "1,234", "change": "+12%", "change_type": "increase"},
    {"name": "Active Providers", "value": "256", "change": "+5%", "change_type": "increase"},
    {"name": "Jobs This Month", "value": "1,024", "change": "+8%", "change_type": "increase"},
    {"name": "Disputes", "value": "12", "change": "-2%", "change_type": "decrease"},
]

ADMIN_ACTIVITIES = [
    {"id": 1, "user": "John Doe", "action": "completed a job", "time": "2h ago"},
    {"id": 2, "user": "Jane Smith", "action": "signed up as a provider", "time": "4h ago"},
    {"id": 3, "user": "Mike Johnson", "action": "reported an issue", "time": "1d ago"},
]

ADMIN_TOP_CATEGORIES = [
    {"name": "Plumbing", "jobs": 245, "change": "12%"},
    {"name": "Electrical", "jobs": 198, "change": "8%"},
    {"name": "Cleaning", "jobs": 156, "change": "15%"},
    {"name": "Moving", "jobs": 132, "change": "5%"},
]

ADMIN_USERS = [
    AdminUser(id="1", name="John Doe", email="john@example.com", type="provider", status="active",
              rating=4.8, jobs_completed=42, last_active="2h ago", region="Lagos"),
    AdminUser(id="2", name="Jane Smith", email="jane@example.com", type="user", status="active",
              rating=4.6, jobs_completed=7, last_active="4h ago", region="Abuja"),
    AdminUser(id="3", name="Mike Johnson", email="mike@example.com", type="provider", status="suspended",
              rating=3.9, jobs_completed=18, last_active="1d ago", region="Lagos"),
    AdminUser(id="4", name="Grace Okafor", email="grace@example.com", type="provider", status="pending",
              rating=0, jobs_completed=0, last_active="3d ago", region="Port Harcourt"),
]

ADMIN_JOBS = [
    AdminJob(id="101", title="Plumbing Repair", status="completed", user="Jane Smith", provider="John Doe",
             date="2023-10-09", amount=15000, category="Plumbing"),
]

ADMIN_PLACEHOLDERS = {
    "jobs": ("Job Management", "Job management features will be implemented here."),
    "analytics": ("Analytics Dashboard", "Analytics and reporting features will be implemented here."),
    "moderation": ("Content Moderation", "Content moderation tools will be implemented here."),
}

FAQ_ITEMS = [
    {"id": "safety", "question": "Safety First", "answer": [
        "Your safety is our top priority. Always use the QuickHelp platform to book and communicate with service providers.",
        "Always communicate and pay through the QuickHelp platform",
        "Verify provider ratings and reviews before booking",
        "Never share personal contact information before booking",
        "Report any suspicious activity immediately",
        "Note: Users with repeated off-platform booking complaints will have their visibility reduced.",
    ]},
    {"id": "search", "question": "How to Search for Services", "answer": [
        "Open the QuickHelp app",
        'Use the search bar to enter the service you need (e.g., "plumber", "electrician")',
        "Browse through the list of available providers",
        "Filter results by rating, distance, or price",
        "View provider profiles to see their ratings and reviews",
        "Tip: Save your favorite providers for quick access in the future.",
    ]},
    {"id": "booking", "question": "How to Book a Service", "answer": [
        "Find a service provider that meets your needs",
        "Select your preferred date and time",
        "Provide details about the job",
        "Review the total cost and any additional fees",
        "Confirm your booking",
    ]},
    {"id": "rating", "question": "How to Rate a Service", "answer": [
        "After your service is completed, you'll receive a rating prompt",
        "Rate your experience from 1 to 5 stars",
        "Write a brief review about your experience (optional but helpful)",
        "Submit your rating",
    ]},
    {"id": "reporting", "question": "How to Report an Issue", "answer": [
        "Go to the booking in your 'Past Bookings'",
        "Select 'Report an Issue'",
        "Choose the type of issue from the list",
        "Provide details about what happened",
        "Submit your report",
        "Note: All reports are taken seriously and will be investigated promptly.",
    ]},
    {"id": "chat", "question": "How to Use the Chat", "answer": [
        "After booking, go to the 'Chats' tab",
        "Select your booking to open the chat",
        "Send messages, photos, or documents related to your service",
        "Remember: Always keep communication within the app for your safety and records.",
    ]},
    {"id": "verification", "question": "How to Get Verified", "answer": [
        "Your information is securely stored and only used for verification purposes.",
    ]},
]

RULE_SECTIONS = [
    {"id": "community-guidelines", "title": "Community Guidelines", "items": [
        "Be respectful and professional in all communications",
        "Provide accurate information in your profile and service listings",
        "Respect others' time and privacy",
        "Do not engage in harassment, discrimination, or hate speech",
        "Keep all communications and transactions on the platform",
    ]},
    {"id": "user-responsibilities", "title": "User Responsibilities", "items": [
        "Provide accurate and complete information when creating an account",
        "Pay for services as agreed upon with the service provider",
        "Communicate clearly about your needs and expectations",
        "Respect the service provider's time and property",
        "Report any issues or concerns through the proper channels",
    ]},
    {"id": "provider-requirements", "title": "Service Provider Requirements", "items": [
        "Provide proof of necessary qualifications and certifications",
        "Maintain accurate and up-to-date service listings",
        "Respond to service requests in a timely manner",
        "Deliver services as described in your listings",
        "Maintain appropriate insurance coverage",
        "Adhere to all applicable laws and regulations",
    ]},
    {"id": "payment-terms", "title": "Payment Terms", "items": [
        "All payments must be processed through the platform",
        "Service providers set their own rates and payment terms",
        "Platform fees will be clearly displayed before booking",
        "Refund policies vary by service provider",
        "Disputes must be reported within 7 days of service completion",
    ]},
    {"id": "safety-policies", "title": "Safety Policies", "items": [
        "Verify service provider ratings and reviews before booking",
        "Meet in public places when possible",
        "Let someone know when and where you'll be meeting a service provider",
        "Trust your instincts - if something feels wrong, cancel the booking",
        "Keep personal contact information private",
    ]},
    {"id": "dispute-resolution", "title": "Dispute Resolution", "items": [
        "Use the platform's messaging system for all communications",
        "Report any suspicious or inappropriate behavior",
    ]},
]

DEFAULT_EXPANDED_RULES = {"community-guidelines"}
