"""Sample tasks created in an empty store, one of each kind."""

SAMPLE_TASKS: list[dict] = [
    {
        "name": "Product launch checklist",
        "description": "Go through the final checks before release.",
        "kind": "once",
        "target": 5,
    },
    {
        "name": "Weekly meeting prep",
        "description": "Summarize project progress and draft the meeting outline.",
        "kind": "cycle",
        "target": 1,
        "repeat_rule": "weekly",
    },
    {
        "name": "English study plan",
        "description": "Build vocabulary and practice speaking over time.",
        "kind": "long_term",
        "target": 30,
        "date_range": ["2025-01-01", "2025-06-30"],
    },
]
