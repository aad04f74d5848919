TYPE_CLASSIFICATION_SYSTEM_PROMPT = """You classify personal documents.

Classify the document into exactly one of these categories:
{categories}

Category guide:
- health_visit: doctor, dentist or clinic visit notes
- health_test: medical test results (imaging, screening)
- health_lab: laboratory reports (blood work, panels)
- receipt: purchase receipts and invoices
- insurance: insurance policies, cards and claims
- id: passports, driver licences, identity cards
- travel: tickets, itineraries, bookings
- work_contract: employment contracts and offer letters
- tax: tax returns, assessments, statements
- car: vehicle registration, service, purchase papers
- home: lease, mortgage, utility and property papers
- visa: visas and residence permits
- other: anything else

Reply with ONLY the category name in lowercase. No punctuation, no explanation.
"""

TYPE_CLASSIFICATION_USER_PROMPT = """Document:
{text}

Category:"""
