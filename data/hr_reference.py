"""
Bundled HR reference document.
Injected verbatim into every generation prompt as the source of truth.
In production this is replaced by a JSON file (HR_DATA_FILE).
"""

import json
from pathlib import Path
from typing import Any

HR_DATA = {
    "company": "Acme Corp",
    "leave_policy": {
        "casual_leave": {
            "annual_allowance": 12,
            "max_consecutive_days": 3,
            "notice": "Apply at least one day in advance.",
        },
        "sick_leave": {
            "annual_allowance": 10,
            "documentation_required_after_days": 2,
            "notice": "Inform your manager on the same day.",
        },
        "earned_leave": {
            "annual_allowance": 18,
            "carryover_limit": 30,
            "notice": "Apply at least seven days in advance.",
        },
    },
    "holidays": [
        {"date": "2026-01-26", "name": "Republic Day"},
        {"date": "2026-03-04", "name": "Holi"},
        {"date": "2026-08-15", "name": "Independence Day"},
        {"date": "2026-10-02", "name": "Gandhi Jayanti"},
        {"date": "2026-11-08", "name": "Diwali"},
        {"date": "2026-12-25", "name": "Christmas"},
    ],
    "benefits": {
        "health_insurance": "Family floater cover up to 5 lakh, employee and dependants.",
        "provident_fund": "12% employer contribution on basic salary.",
        "learning_allowance": "Up to 20,000 per year for courses and certifications.",
    },
    "policies": {
        "remote_work": "Up to two remote days per week with manager approval.",
        "code_of_conduct": "Available on the intranet under HR > Policies.",
    },
    "working_hours": {
        "core_hours": "10:00 to 16:00",
        "weekly_hours": 40,
        "days": "Monday to Friday",
    },
    "contact": {"email": "hr@acme.example", "extension": "4400"},
}


def load_hr_reference(path: str | None = None) -> dict[str, Any]:
    """Load the reference document from a JSON file, or the bundled one."""
    if not path:
        return HR_DATA
    return json.loads(Path(path).read_text(encoding="utf-8"))
