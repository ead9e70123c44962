from collections.abc import Iterable
from dataclasses import replace

from .merge import StandardField
from .models import DefaultFieldOrder, EntityType


def _fields(*rows: dict) -> tuple[StandardField, ...]:
    return tuple(
        StandardField(**{**row, "options": tuple(row.get("options", ()))})
        for row in rows
    )


STUDENT_FIELDS = _fields(
    {"id": "firstName", "label": "First Name", "type": "text", "category": "personal", "sort_order": 10, "required": True, "width": "half"},
    {"id": "fatherName", "label": "Father's Name", "type": "text", "category": "personal", "sort_order": 20, "required": True, "width": "half"},
    {"id": "grandfatherName", "label": "Grandfather's Name", "type": "text", "category": "personal", "sort_order": 30, "width": "half"},
    {"id": "lastName", "label": "Surname", "type": "text", "category": "personal", "sort_order": 40, "required": True, "width": "half"},
    {"id": "dateOfBirth", "label": "Date of Birth", "type": "date", "category": "personal", "sort_order": 50, "required": True, "width": "half"},
    {"id": "gender", "label": "Gender", "type": "select", "category": "personal", "sort_order": 60, "required": True, "width": "half", "options": ["male", "female"]},
    {"id": "studentPhoto", "label": "Student Photo", "type": "photo", "category": "personal", "sort_order": 70, "width": "full"},
    {"id": "address", "label": "Address", "type": "textarea", "category": "personal", "sort_order": 80, "width": "full"},
    {"id": "email", "label": "Email", "type": "email", "category": "personal", "sort_order": 90, "required": True, "width": "half"},
    {"id": "phoneNumber", "label": "Phone Number", "type": "text", "category": "personal", "sort_order": 100, "width": "half"},
    {"id": "grade_level_id", "label": "Grade Level", "type": "grade_select", "category": "academic", "sort_order": 10, "required": True, "width": "half"},
    {"id": "section_id", "label": "Section", "type": "section_select", "category": "academic", "sort_order": 20, "required": True, "width": "half"},
    {"id": "admissionDate", "label": "Admission Date", "type": "date", "category": "academic", "sort_order": 30, "required": True, "width": "half"},
    {"id": "previousSchoolHistory", "label": "Previous School History", "type": "school_history", "category": "academic", "sort_order": 40, "width": "full"},
    {"id": "bloodGroup", "label": "Blood Group", "type": "select", "category": "medical", "sort_order": 10, "required": True, "width": "half", "options": ["A+", "A-", "B+", "B-", "O+", "O-", "AB+", "AB-"]},
    {"id": "hasAllergies", "label": "Has Allergies?", "type": "checkbox", "category": "medical", "sort_order": 20, "width": "half"},
    {"id": "allergiesList", "label": "Allergies List", "type": "tags", "category": "medical", "sort_order": 30, "width": "full"},
    {"id": "medicalNotes", "label": "Medical Notes", "type": "textarea", "category": "medical", "sort_order": 40, "width": "full"},
    {"id": "linkedParentId", "label": "Link to Parent", "type": "parent_search", "category": "family", "sort_order": 10, "width": "full"},
    {"id": "parentRelationType", "label": "Relationship Type", "type": "select", "category": "family", "sort_order": 20, "width": "half", "options": ["father", "mother", "guardian", "other"]},
    {"id": "emergencyContacts", "label": "Emergency Contacts", "type": "emergency_contacts", "category": "family", "sort_order": 30, "width": "full"},
    {"id": "selectedServices", "label": "School Services", "type": "service_select", "category": "services", "sort_order": 10, "width": "full"},
    {"id": "studentId", "label": "Student ID / Roll Number", "type": "text", "category": "system", "sort_order": 10, "width": "half"},
    {"id": "username", "label": "Username", "type": "text", "category": "system", "sort_order": 20, "width": "half"},
    {"id": "password", "label": "Password (Default)", "type": "text", "category": "system", "sort_order": 30, "width": "half"},
    {"id": "status", "label": "Status", "type": "select", "category": "system", "sort_order": 40, "width": "half", "options": ["active", "inactive", "suspended"]},
)

PARENT_FIELDS = _fields(
    {"id": "primaryFirstName", "label": "First Name", "type": "text", "category": "personal", "sort_order": 10, "required": True, "width": "half"},
    {"id": "primaryLastName", "label": "Last Name", "type": "text", "category": "personal", "sort_order": 20, "required": True, "width": "half"},
    {"id": "primaryCNIC", "label": "CNIC / ID Number", "type": "text", "category": "personal", "sort_order": 30, "required": True, "width": "half", "placeholder": "XXXXX-XXXXXXX-X"},
    {"id": "primaryPhone", "label": "Phone Number", "type": "text", "category": "personal", "sort_order": 40, "required": True, "width": "half", "placeholder": "+92 XXX XXXXXXX"},
    {"id": "primaryEmail", "label": "Email Address", "type": "email", "category": "personal", "sort_order": 50, "required": True, "width": "half", "placeholder": "email@example.com"},
    {"id": "primaryOccupation", "label": "Occupation", "type": "text", "category": "professional", "sort_order": 10, "required": True, "width": "half", "placeholder": "e.g., Teacher"},
    {"id": "primaryWorkplace", "label": "Workplace", "type": "text", "category": "professional", "sort_order": 20, "width": "half"},
    {"id": "primaryIncome", "label": "Monthly Income", "type": "number", "category": "professional", "sort_order": 30, "width": "half"},
    {"id": "address", "label": "Home Address", "type": "textarea", "category": "contact", "sort_order": 10, "width": "full"},
    {"id": "city", "label": "City", "type": "text", "category": "contact", "sort_order": 20, "width": "half"},
    {"id": "state", "label": "State/Province", "type": "text", "category": "contact", "sort_order": 30, "width": "half"},
    {"id": "zipCode", "label": "ZIP/Postal Code", "type": "text", "category": "contact", "sort_order": 40, "width": "half"},
    {"id": "country", "label": "Country", "type": "text", "category": "contact", "sort_order": 50, "width": "half", "default_value": "Pakistan"},
    {"id": "emergencyContactName", "label": "Emergency Contact Name", "type": "text", "category": "emergency", "sort_order": 10, "width": "third"},
    {"id": "emergencyContactRelation", "label": "Relationship", "type": "text", "category": "emergency", "sort_order": 20, "width": "third"},
    {"id": "emergencyContactPhone", "label": "Phone", "type": "text", "category": "emergency", "sort_order": 30, "width": "third"},
    {"id": "username", "label": "Username", "type": "text", "category": "system", "sort_order": 10, "width": "half", "help": "Auto-generated if empty"},
    {"id": "password", "label": "Password", "type": "text", "category": "system", "sort_order": 20, "width": "half", "help": "Auto-generated"},
    {"id": "notes", "label": "Additional Notes", "type": "textarea", "category": "system", "sort_order": 30, "width": "full"},
)

TEACHER_FIELDS = _fields(
    {"id": "first_name", "label": "First Name", "type": "text", "category": "personal", "sort_order": 10, "required": True, "width": "half"},
    {"id": "last_name", "label": "Last Name", "type": "text", "category": "personal", "sort_order": 20, "required": True, "width": "half"},
    {"id": "email", "label": "Email", "type": "email", "category": "personal", "sort_order": 30, "required": True, "width": "half"},
    {"id": "phone", "label": "Phone", "type": "text", "category": "personal", "sort_order": 40, "width": "half"},
    {"id": "employment_type", "label": "Employment Type", "type": "select", "category": "professional", "sort_order": 10, "required": True, "width": "half", "options": ["full_time", "part_time", "contract"]},
    {"id": "payment_type", "label": "Payment Type", "type": "select", "category": "professional", "sort_order": 20, "required": True, "width": "half", "options": ["fixed_salary", "hourly"], "help": "Hourly teachers appear in Teacher Hours module"},
    {"id": "date_of_joining", "label": "Date of Joining", "type": "date", "category": "professional", "sort_order": 30, "width": "half"},
    {"id": "title", "label": "Title", "type": "text", "category": "professional", "sort_order": 40, "width": "half", "placeholder": "e.g., Senior Teacher"},
    {"id": "department", "label": "Department", "type": "text", "category": "professional", "sort_order": 50, "width": "half", "placeholder": "e.g., Science"},
    {"id": "base_salary", "label": "Base Salary (Monthly)", "type": "number", "category": "professional", "sort_order": 60, "width": "full", "help": "Required for fixed salary teachers"},
    {"id": "qualifications", "label": "Qualifications", "type": "text", "category": "qualifications", "sort_order": 10, "width": "full", "placeholder": "e.g., M.Sc. Mathematics"},
    {"id": "specialization", "label": "Specialization", "type": "text", "category": "qualifications", "sort_order": 20, "width": "full", "placeholder": "e.g., Applied Mathematics"},
    {"id": "employee_number", "label": "Employee Number", "type": "text", "category": "system", "sort_order": 10, "width": "half", "help": "Auto-generated if empty"},
    {"id": "username", "label": "Username", "type": "text", "category": "system", "sort_order": 20, "width": "half", "help": "Auto-generated from name"},
    {"id": "password", "label": "Password", "type": "text", "category": "system", "sort_order": 30, "width": "full", "help": "Auto-generated secure password"},
)

STANDARD_FIELDS: dict[EntityType, tuple[StandardField, ...]] = {
    EntityType.STUDENT: STUDENT_FIELDS,
    EntityType.PARENT: PARENT_FIELDS,
    EntityType.TEACHER: TEACHER_FIELDS,
}


def get_standard_fields(entity_type: EntityType) -> list[StandardField]:
    return list(STANDARD_FIELDS[EntityType(entity_type)])


def list_categories(entity_type: EntityType) -> list[str]:
    seen: list[str] = []
    for item in STANDARD_FIELDS[EntityType(entity_type)]:
        if item.category not in seen:
            seen.append(item.category)
    return seen


def apply_field_orders(
    fields: Iterable[StandardField],
    orders: Iterable[DefaultFieldOrder],
) -> list[StandardField]:
    # Stored overrides are keyed by (category, label), not by field id.
    overrides = {(order.category_id, order.field_label): order.sort_order for order in orders}
    return [
        replace(item, sort_order=overrides[(item.category, item.label)])
        if (item.category, item.label) in overrides
        else item
        for item in fields
    ]
