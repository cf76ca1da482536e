"""Instruction payload sent to the claim extraction service."""

CLAIM_EXTRACTION_INSTRUCTION = (
    "Extract JSON with fields: date(YYYY-MM-DD), title, description (2-5 sentences), "
    "sources[], and disputedClaims[] where each disputed claim has "
    "{ claimText, source, timestamp }. disputedClaims should list notable "
    "counter-claims that deny or contradict the reported event."
)
