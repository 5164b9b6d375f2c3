from enum import Enum

TRENDING_LIMIT = 5
REPORT_POINTS = 5
COMMENT_POINTS = 2
VOTE_POINTS = 1
ASSISTANT_FAILURE_MESSAGE = "Failed to get a response from the AI assistant."
ASSISTANT_EMPTY_REPLY = "Sorry, I couldn't process that. Please try again."
ASSISTANT_GREETING = "Hello! Ask me anything about civic issues in your area."
STATE_KEYS = [
    "session_context",
    "impact_stats",
    "chatbot_messages",
    "chatbot_turn",
    "map_focus",
    "correlation_filters",
]


class QueryKeys(Enum):
    PROBLEMS = "problems"
    NEARBY_PROBLEMS = "nearbyProblems"
    PROBLEM_COUNT = "problemCount"
    VOTE_TOTALS = "problemVoteTotals"
    USER_VOTES = "userVotes"


class Tables(Enum):
    PROBLEMS = "problems"
    VOTES = "votes"
    COMMENTS = "comments"
    PROFILES = "profiles"
    VOTE_TOTALS = "problem_vote_totals"


class Channels(Enum):
    PROBLEMS = "problems-feed"
    VOTES = "votes-feed"


class FeedView(Enum):
    ALL = "all"
    NEARBY = "nearby"
    TRENDING = "trending"


class Label(Enum):
    TITLE = "Title"
    DESCRIPTION = "Description"
    CATEGORY = "Category"
    PINCODE = "Pincode (optional)"
    LATITUDE = "Latitude"
    LONGITUDE = "Longitude"
    SUBMIT_BUTTON = "Submit"
    MANDATORY_FIELD_MARKER = "*"


class Keys(Enum):
    TITLE = "title"
    DESCRIPTION = "description"
    CATEGORY = "category"
    PINCODE = "pincode"
    LATITUDE = "latitude"
    LONGITUDE = "longitude"


PROBLEM_CATEGORIES = [
    "roads",
    "water",
    "electricity",
    "sanitation",
    "safety",
    "environment",
    "other",
]


class Pages(Enum):
    DASHBOARD = {
        "key": "dashboard",
        "title": ":material/dashboard: Dashboard",
    }
    MINISTRY = {
        "key": "ministry",
        "title": ":material/map: Ministry Insights",
    }
    CHATBOT = {
        "key": "chat",
        "title": ":material/smart_toy: Assistant",
    }
