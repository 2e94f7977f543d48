"""Prompts for permit field extraction.

The user prompt is a template: ``{current_date}`` is substituted with the
request date (``YYYY-MM-DD``) before sending.
"""

from datetime import date

from permit_buddy.database.enums import DocumentCategory, DocumentStatus

_CATEGORY_CHOICES = ", ".join(member.value for member in DocumentCategory)
_STATUS_CHOICES = ", ".join(member.value for member in DocumentStatus)

PERMIT_EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert compliance assistant who extracts structured permit data "
    "from uploaded documents. Always respond with ONLY a valid JSON object that "
    "matches the requested schema."
)

PERMIT_EXTRACTION_USER_PROMPT = r"""You are helping populate a permit management form. Analyze this document (PDF or image) and infer as much detail as possible.

Today's date is {current_date}. Use it as the reference when determining whether a permit is PENDING_ACTIVATION, ACTIVE, PENDING_RENEWAL, or EXPIRED.

Return JSON with the following keys:
- title: concise permit or license title. Prefer the document headline or a combination of permit type and location. If a vehicle, include vehicle year, and type. Use an empty string if unknown.
- permit_number: the permit or license identifier. Empty string if unknown.
- document_category: choose ONE of [__CATEGORIES__]. Select the closest match.
- status: choose ONE of [__STATUSES__]. Infer from context (e.g., expired date -> EXPIRED, upcoming renewal -> PENDING_RENEWAL) or default to ACTIVE if unclear.
- start_date: the issuance or effective date in ISO format YYYY-MM-DD, or an empty string if unclear.
- end_date: the expiration or renewal date in ISO format YYYY-MM-DD, or an empty string if unclear.
- auto_renew: boolean true/false. Use true only if the document explicitly states automatic renewal, otherwise false.
- jurisdiction: the municipality, county, state, or other jurisdiction tied to this permit. Empty string if unknown.
- issuing_authority: the department, agency, or organization that issued the permit. Empty string if unknown.

Rules:
- Use only ASCII characters in the JSON.
- Never invent data, but infer when the document makes it obvious.
- If multiple dates exist, treat the earliest issuance/duty date as start_date and the latest validity/expiration as end_date.
- Ensure that start_date is always on or before end_date.
- For end_date: If a specific expiration date is not present, *calculate* it from the start_date and the extracted term_duration. (e.g., start_date "2025-01-01" and term_duration "one year" -> end_date "2025-12-31").
- For status: You MUST determine the status by following these rules in this specific order:
  1.  If the start_date is after {current_date}, the status is PENDING_ACTIVATION.
  2.  ELSE, if the end_date is before {current_date}, the status is EXPIRED.
  3.  ELSE, if the start_date is on or before {current_date} AND the end_date is on or after {current_date}, the status is ACTIVE.
  4.  ELSE (e.g., if no dates are found), default to ACTIVE.
- For document_category: Prioritize the document's main title (e.g., a "Certificate of Liability Insurance" is INSURANCE).
- Examples:
  - Input Text Snippet: "Certificate of Liability. This policy is effective January 1, 2025. This certificate is not valid for more than one year from the effective date."
  - Output JSON:
    {{
      "title": "Certificate of Liability",
      "permit_number": "",
      "document_category": "INSURANCE",
      "status": "ACTIVE",
      "start_date": "2025-01-01",
      "end_date": "2025-12-31",
      "term_duration": "one year",
      "auto_renew": false,
      "jurisdiction": "",
      "issuing_authority": ""
    }}
  - Input Text Snippet: "Current date - 2025-11-17, PENNSYLVANIA FINANCIAL RESPONSIBILITY IDENTIFICATION CARD. Effective Date 01/12/26. NOT VALID MORE THAN SIX MONTHS FROM EFFECTIVE DATE. Vehicle: 2015 FORD."
  - Output JSON:
    {{
      "title": "2015 FORD Financial Responsibility ID Card",
      "permit_number": "",
      "document_category": "INSURANCE",
      "status": "PENDING_ACTIVATION",
      "start_date": "2026-01-12",
      "end_date": "2026-07-12",
      "term_duration": "SIX MONTHS",
      "auto_renew": false,
      "jurisdiction": "PENNSYLVANIA",
      "issuing_authority": "USAA"
    }}
  - Input Text Snippet: "Charleston Fire Department Operational Permit Sticker. Mobile Food Service Vendor [checked]. Good for 1 yr. from date stamp.. Issued by: Charleston-sc.gov/fm"
  - Output JSON:
    {{
      "title": "Charleston Fire Department Operational Permit Sticker",
      "permit_number": "",
      "document_category": "PERMIT",
      "status": "EXPIRED",
      "start_date": "2019-04-07",
      "end_date": "2020-04-07",
      "term_duration": "1 yr.",
      "auto_renew": false,
      "jurisdiction": "Charleston",
      "issuing_authority": "Charleston Fire Department"
    }}
- Focus on filling every field with the best available information.
- Respond ONLY with JSON, no commentary.""".replace("__CATEGORIES__", _CATEGORY_CHOICES).replace(
    "__STATUSES__", _STATUS_CHOICES
)


def build_extraction_prompt(current_date: date) -> str:
    """Render the user prompt for ``current_date``."""
    return PERMIT_EXTRACTION_USER_PROMPT.format(current_date=current_date.isoformat())
