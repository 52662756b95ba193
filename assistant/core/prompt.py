from __future__ import annotations

from langchain_core.prompts import ChatPromptTemplate


ALLOWED_INTENTS = [
    "find_places",
    "find_events",
    "recommend",
    "greeting",
    "introduction",
    "smalltalk",
    "gratitude",
    "user_identification",
    "unknown",
]

# Literal braces are doubled for ChatPromptTemplate.
INTENT_SYSTEM_PROMPT = """You are a STRICT intent extraction engine for a {city} city guide.

Rules:
- DO NOT answer the user
- DO NOT suggest places or events
- DO NOT invent data
- Choose intent ONLY from this list:
{allowed_intents}

Intent descriptions:
- greeting: Simple hello without specific requests
- introduction: Asking who you are or what you can do
- user_identification: User introducing themselves (e.g., "I'm John", "my name is Sarah")
- find_places: Looking for places like restaurants, cafes, museums
- find_events: Looking for events, concerts, performances
- recommend: Asking for recommendations or suggestions
- smalltalk: Casual conversation
- gratitude: Expressions of thanks (thank you, thanks, etc.)
- unknown: If unclear

Field specifications:
- timeOfDay: ONLY "morning", "afternoon", or "evening" (null if not specified)
- category: Place or event type like "restaurant", "cafe", "museum", "concert" (null if not specified)
- date: ISO date string like "2026-01-10" (null if not specified)
- name: User's name when introducing themselves (null otherwise)

List in missingFields only the fields among "category" and "timeOfDay"
that the request needs but the user did not give.

Examples:
- "Hi, I'm John" -> intent: "user_identification", extractedData: {{"name": "John"}}
- "Find restaurants in the evening" -> intent: "find_places", extractedData: {{"category": "restaurant", "timeOfDay": "evening"}}
- "What's happening today?" -> intent: "find_events", extractedData: {{"date": "{today}"}}
- "Thank you" -> intent: "gratitude"
- "Recommend a place to eat" -> intent: "recommend", extractedData: {{"category": "restaurant"}}

Required output:
Valid JSON only. No markdown.

Schema:
{{
  "intent": "string",
  "missingFields": ["category", "timeOfDay"],
  "confidence": number (0.0 - 1.0),
  "extractedData": {{
    "category": string | null,
    "timeOfDay": string | null,
    "date": string | null,
    "name": string | null
  }}
}}"""

INTENT_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", INTENT_SYSTEM_PROMPT),
        (
            "human",
            (
                "Context:\n"
                "City: {city}\n"
                "Current date: {today}\n"
                "User name: {user_name}\n"
                "User location: {user_location}\n\n"
                'User message:\n"{message}"'
            ),
        ),
    ]
)

MISSING_DATA_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            (
                "You are extracting missing information from a user's clarification response.\n\n"
                "Field specifications:\n"
                '- timeOfDay: ONLY "morning", "afternoon", or "evening"\n'
                '- category: Place type like "restaurant", "cafe", "museum"\n'
                '- date: ISO date string like "2026-01-10"\n\n'
                "Extract the values for the missing fields. Output valid JSON only.\n\n"
                "Schema:\n"
                '{{"category": string | null, "timeOfDay": string | null, "date": string | null}}'
            ),
        ),
        (
            "human",
            (
                "Missing fields needed: {missing_fields}\n\n"
                'User\'s clarification response:\n"{message}"'
            ),
        ),
    ]
)

CLARIFICATION_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            (
                "You are asking a clarification question.\n\n"
                "Rules:\n"
                "- Ask ONE short, friendly question\n"
                "- Do NOT recommend anything\n"
                "- Do NOT guess missing data\n"
                "- Be conversational\n\n"
                "Output only the question."
            ),
        ),
        ("human", "Intent: {intent}\nMissing information: {missing_fields}"),
    ]
)

FORMAT_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            (
                "You are formatting VERIFIED DATA ONLY for a {city} city guide.\n\n"
                "Rules:\n"
                "- Use ONLY the provided data\n"
                "- Do NOT invent names, ratings, or times\n"
                "- If data is missing, do not mention it\n"
                "- Be friendly, concise, and clear\n"
                "- Plain text, one item per line, no markdown tables"
            ),
        ),
        ("human", 'User query:\n"{query}"\n\nVerified data:\n{data}\n\nFormat the response.'),
    ]
)
