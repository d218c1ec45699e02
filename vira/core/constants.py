"""Application constants."""

# Intent labels (wire values)
INTENT_RECOMMENDATION = "vendor_recommendation"
INTENT_SEARCH = "vendor_search"
INTENT_GENERAL = "general"

# Phrases that ask for a recommendation
RECOMMENDATION_KEYWORDS = (
    "recommend", "suggestion", "find vendors", "best vendor", "who should i",
    "vendors for", "need a vendor", "looking for", "project", "help with",
    "what vendors", "which vendor", "i need", "need help", "vendors do you recommend",
    "who do you recommend", "can you recommend", "suggest", "find me",
    "for my project", "for this project", "best option", "good vendor",
)

# Phrases that ask to browse the directory
SEARCH_KEYWORDS = (
    "show me", "list", "vendors in", "who are", "tell me about",
    "vendors that", "vendors with", "find all", "display", "see all",
    "all vendors", "available vendors",
)

# Service categories recognised verbatim; first match wins
SERVICE_CATEGORIES = (
    "web development", "mobile app", "data analytics", "content", "design",
    "marketing", "seo", "ecommerce", "e-commerce", "crm", "consulting",
    "writing", "content writing", "automotive content", "copywriting",
    "development", "app development", "website", "graphic design",
)

# Context terms -> canonical category, checked in order
IMPLIED_CATEGORY_RULES = (
    (("writer", "writing", "content"), "content"),
    (("website", "web", "development"), "web development"),
    (("app", "mobile"), "mobile app"),
    (("data", "analytics"), "data analytics"),
    (("design", "graphic"), "design"),
    (("marketing", "seo"), "marketing"),
)
DEFAULT_IMPLIED_CATEGORY = "consulting"

# Fallback rationale when ranking comes from historical data only
FALLBACK_RATIONALE = "Ranked by historical performance data."

# Ranking source labels
RANKING_SOURCE_AI = "ai"
RANKING_SOURCE_FALLBACK = "fallback"
RANKING_SOURCE_NONE = "none"

# Vendor status values
VENDOR_STATUS_ACTIVE = "active"

# Canned chat replies
CHAT_GENERIC_ERROR_REPLY = (
    "Sorry, something went wrong while handling your message. "
    "Please try again, or ask me to recommend or search for vendors."
)
CHAT_GENERAL_FALLBACK_REPLY = (
    "I'm having trouble processing that right now. I'm ViRA, your vendor "
    "intelligence assistant. I can help you find vendors, search our database, "
    "or answer questions about vendor selection. What would you like to know?"
)
CHAT_RECOMMENDATION_ERROR_REPLY = (
    "I'm having trouble accessing the vendor recommendation system right now. "
    "You can try using the ViRA Match page directly, or ask me something else "
    "about our vendors."
)

HEALTH_CAPABILITIES = (
    "vendor_recommendations",
    "vendor_search",
    "general_conversation",
    "session_history",
)
