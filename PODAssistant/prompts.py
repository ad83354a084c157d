"""
prompts.py

LLM prompts and canned assistant replies for the POD Assistant.

Every user-facing string lives here so the workflow nodes only decide
*which* reply to emit.
"""

# ---------------------------------------------------------------------------
# Vision verification
# ---------------------------------------------------------------------------

POD_VERIFICATION_PROMPT_TEMPLATE = """
You are a logistics assistant verifying a Proof of Delivery (POD) document.

DOCKET DETAILS:
- ID: {docket_id}
- Customer: {customer_name}
- Address: {delivery_address}

TASK:
1. Check if the image is a valid POD (Proof of Delivery).
2. Verify if the Docket ID or Customer Name is visible and matches.
3. Check for a signature or stamp indicating receipt.
4. Determine if this POD is "GOOD" (valid) or "BAD" (invalid/missing info).

Respond in a friendly tone. If it is good, explicitly say "This POD is good".
Summarize what you found (e.g., "Signature found", "Address matches").
"""

# ---------------------------------------------------------------------------
# General assistant
# ---------------------------------------------------------------------------

GENERAL_ASSISTANT_SYSTEM_PROMPT = (
    "You are a helpful logistics assistant. You help users verify PODs "
    "against dockets. If they give you a docket number like DKT-1001, tell "
    "them you can search for it. If they ask to update, tell them they need "
    "to upload a verified POD first."
)

# ---------------------------------------------------------------------------
# Canned replies
# ---------------------------------------------------------------------------

WELCOME_MESSAGE = (
    "Hello! I'm your POD Verification Assistant. Please provide a "
    "**Docket Number** to get started, then upload a **POD image** for "
    "verification."
)

DOCKET_FOUND_TEMPLATE = (
    "Found Docket: **{docket_id}**\n\n"
    "**Customer:** {customer_name}\n"
    "**Address:** {delivery_address}\n"
    "**Status:** {status}\n\n"
    "Please upload the POD image for verification."
)

DOCKET_NOT_FOUND_TEMPLATE = (
    "Sorry, I couldn't find docket **{docket_id}**. Try {suggestions}."
)

COMMIT_NO_DOCKET = "Please provide a docket number first."

COMMIT_NO_EVIDENCE = (
    "I haven't verified a POD for this docket yet. "
    "Please upload the POD image first."
)

COMMIT_SUCCESS_TEMPLATE = (
    "Successfully updated docket **{docket_id}** status to **Delivered**. "
    "POD has been verified and recorded."
)

COMMIT_FAILED = "Failed to update the docket. Please try again."

UPLOAD_NO_DOCKET = (
    "Please search for a docket (e.g., DKT-1001) before uploading the POD."
)

UPLOAD_BUSY = (
    "I'm still analyzing the previous POD image. "
    "Please wait for the result before uploading another one."
)

UPLOAD_USER_MESSAGE = "Uploaded POD image"

ANALYSIS_LOADING = "Analyzing POD image against docket details..."

ANALYSIS_FAILED = (
    "Sorry, I encountered an error while analyzing the POD. Please try again."
)

FREEFORM_EMPTY = "I'm not sure how to help with that."

FREEFORM_UNAVAILABLE = "I'm having trouble connecting right now."

RESET_CONFIRMATION = (
    "Cleared the active docket. Please provide a **Docket Number** to "
    "start again."
)

# ---------------------------------------------------------------------------
# Suggested actions
# ---------------------------------------------------------------------------

ACTION_UPLOAD_POD = "Upload POD"
ACTION_CONFIRM_UPDATE = "Confirm Update"
CONFIRM_UPDATE_UTTERANCE = "Please update"
