"""Built-in wizard templates inserted by `python -m stepform.cli seed-templates`.

Field `external_mapping` values use `entity.property` strings understood
by `CrmRecordCollector` (`client.*`, `contact.*`).
"""

from stepform.schemas.wizard import TemplateCreate

NEW_CLIENT_INTAKE = TemplateCreate.model_validate({
    "name": "New Client Intake",
    "description": "Collect company, contact and project details for a new client.",
    "category": "onboarding",
    "allow_save_progress": True,
    "show_progress_bar": True,
    "completion_message": "Thanks! Our team will be in touch within two working days.",
    "steps": [
        {
            "title": "Company",
            "description": "Tell us about the business.",
            "fields": [
                {
                    "label": "Company name",
                    "name": "company_name",
                    "type": "TEXT",
                    "is_required": True,
                    "validation": {"min_length": 2, "max_length": 200},
                    "external_mapping": "client.company_name",
                },
                {
                    "label": "Industry",
                    "name": "industry",
                    "type": "SELECT",
                    "options": [
                        {"label": "Retail", "value": "retail"},
                        {"label": "Manufacturing", "value": "manufacturing"},
                        {"label": "Professional services", "value": "services"},
                        {"label": "Other", "value": "other"},
                    ],
                    "external_mapping": "client.industry",
                },
                {
                    "label": "VAT number",
                    "name": "vat_number",
                    "type": "TEXT",
                    "placeholder": "GB123456789",
                    "validation": {"pattern": "[A-Z]{2}[0-9A-Z]{8,12}"},
                    "external_mapping": "client.vat_number",
                },
                {
                    "label": "Number of employees",
                    "name": "employee_count",
                    "type": "NUMBER",
                    "validation": {"min": 1},
                    "external_mapping": "client.employee_count",
                },
            ],
        },
        {
            "title": "Contact",
            "description": "Who should we talk to?",
            "fields": [
                {
                    "label": "Full name",
                    "name": "contact_name",
                    "type": "TEXT",
                    "is_required": True,
                    "external_mapping": "contact.full_name",
                },
                {
                    "label": "Email",
                    "name": "contact_email",
                    "type": "EMAIL",
                    "is_required": True,
                    "external_mapping": "contact.email",
                },
                {
                    "label": "Phone",
                    "name": "contact_phone",
                    "type": "PHONE",
                    "validation": {"pattern": "\\+?[0-9 ()-]{6,20}"},
                    "external_mapping": "contact.phone",
                },
                {
                    "label": "Preferred channel",
                    "name": "preferred_channel",
                    "type": "RADIO",
                    "default_value": "email",
                    "options": [
                        {"label": "Email", "value": "email"},
                        {"label": "Phone", "value": "phone"},
                    ],
                },
                {
                    "label": "Best time to call",
                    "name": "call_hours",
                    "type": "TEXT",
                    "condition": {
                        "field_id": "preferred_channel",
                        "operator": "eq",
                        "value": "phone",
                    },
                },
            ],
        },
        {
            "title": "Project",
            "fields": [
                {
                    "label": "Services of interest",
                    "name": "services",
                    "type": "MULTISELECT",
                    "is_required": True,
                    "options": [
                        {"label": "Consulting", "value": "consulting"},
                        {"label": "Implementation", "value": "implementation"},
                        {"label": "Support", "value": "support"},
                        {"label": "Training", "value": "training"},
                    ],
                },
                {
                    "label": "I would like a quote",
                    "name": "wants_quote",
                    "type": "CHECKBOX",
                },
            ],
        },
        {
            "title": "Budget",
            "description": "Shown only when a quote is requested.",
            "condition": {"field_id": "wants_quote", "operator": "eq", "value": "true"},
            "fields": [
                {
                    "label": "Estimated budget (EUR)",
                    "name": "budget",
                    "type": "NUMBER",
                    "is_required": True,
                    "validation": {"min": 0},
                    "external_mapping": "client.estimated_budget",
                },
                {
                    "label": "Timeline",
                    "name": "timeline",
                    "type": "SELECT",
                    "options": [
                        {"label": "This month", "value": "1m"},
                        {"label": "Within 3 months", "value": "3m"},
                        {"label": "Later", "value": "later"},
                    ],
                },
            ],
        },
        {
            "title": "Notes",
            "fields": [
                {
                    "label": "Anything else?",
                    "name": "notes",
                    "type": "TEXTAREA",
                    "validation": {"max_length": 2000},
                    "external_mapping": "client.notes",
                },
            ],
        },
    ],
})

DEFAULT_TEMPLATES: list[TemplateCreate] = [NEW_CLIENT_INTAKE]
