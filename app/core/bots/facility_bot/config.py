# app/core/bots/facility_bot/config.py
"""
Configuration for the Facility Bot: intent names, entity names and all
user-facing messages.
"""


# ============================================================================
# INTENTS & ENTITIES (names produced by the dispatch LUIS app)
# ============================================================================

INTENT_LOCATE_FACILITY = "LocateFacility"
INTENT_FRIENDLY_CHAT = "FriendlyChat"
INTENT_EVENT_HISTORY = "EventHistory"

ENTITY_TO_LOCATION = "ToLocation"
ENTITY_FROM_LOCATION = "FromLocation"

# State property names (keys in the conversation / user stores)
CONVERSATION_FLOW_PROPERTY = "CONVERSATION_FLOW_PROPERTY"
LOCATE_FACILITY_PROPERTY = "LOCATE_FACILITY_PROPERTY"


# ============================================================================
# MESSAGES
# ============================================================================

FACILITY_BOT_TEXTS = {
    # Navigation questions
    "q_to_location": "Where are you going?",
    "q_from_location": "From what location are you currently in?",

    # Confirmations
    "ack_to_location": "I have your destination as {to_location}.",
    "ack_both_locations": "I have your destination as {to_location} and current location as {from_location}.",

    # Path results
    "path_found": "Here is the path I found:  {path}.",
    "err_path_not_found": "I'm sorry I can't find a path that from {from_location} to {to_location}.",
    "escalate": "Please kindly inform my creator.",

    # Validation
    "err_to_location": "I'm sorry I can't accept {input} as destination. Please try another location.",
    "err_from_location": "I'm sorry I can't accept {input} as current location. Please try another location.",
    "err_not_understood": "I'm sorry, I didn't understand that.",
    "err_attempts_exhausted": "I'm sorry, I still couldn't recognize that location. Let's start over another time.",

    # Knowledge bases
    "err_no_answer": "Sorry, could not find an answer in the Q and A system.",

    # Dispatch
    "err_unrecognized_intent": "Dispatch unrecognized intent: {intent}.",
}
