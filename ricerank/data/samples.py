"""
Sample backlogs for demos, the CLI and the API.

Two realistic sets: a B2B SaaS roadmap and a consumer app roadmap.
Items are stored in the request wire format (camelCase).
"""

from copy import deepcopy
from typing import Any, Dict, List


def _item(item_id, title, description, evidence, reach, unit, impact, confidence, effort):
    return {
        "itemId": item_id,
        "title": title,
        "description": description,
        "evidence": evidence,
        "inputs": {
            "reach": {"value": reach, "unit": unit, "timeframe": "month"},
            "impact": impact,
            "confidence": confidence,
            "effort": effort,
        },
    }


SAMPLE_SAAS: List[Dict[str, Any]] = [
    _item("I1", "Onboarding checklist",
          "Interactive first-run experience to reduce drop-off after signup.",
          "40% drop-off after signup", 5000, "users", 1, 95, 3),
    _item("I2", "Slack integration",
          "Post notifications to Slack channels for teams.",
          "Top requested feature in survey (23 votes)", 3000, "users", 2, 85, 10),
    _item("I3", "2FA authentication",
          "Add two-factor authentication for enterprise customers.",
          "3 enterprise clients requested this", 500, "accounts", 3, 90, 13),
    _item("I4", "API rate limit dashboard",
          "Show real-time API usage and limits.",
          "", 1200, "users", 1, 70, 5),
    _item("I5", "Bulk email templates",
          "Allow users to create and save reusable email templates.",
          "", 2000, "users", 2, 80, 8),
    _item("I6", "Advanced analytics",
          "Custom reports and data export features.",
          "", 800, "users", 3, 60, 21),
    _item("I7", "Team collaboration",
          "Real-time co-editing and commenting.",
          "", 600, "users", 3, 40, 21),
    _item("I8", "Mobile app (iOS)",
          "Native iOS app for on-the-go access.",
          "", 1500, "users", 2, 50, 34),
]

SAMPLE_CONSUMER: List[Dict[str, Any]] = [
    _item("I1", "Push notifications",
          "Engagement alerts and updates.",
          "Similar apps see 2x retention", 20000, "users", 2, 85, 8),
    _item("I2", "Social sharing",
          "Share to Instagram, TikTok, Twitter.",
          "", 12000, "users", 2, 80, 8),
    _item("I3", "Dark mode",
          "System-wide dark theme toggle.",
          "Reddit thread with 500+ upvotes", 8000, "users", 1, 90, 5),
    _item("I4", "AI photo filters",
          "ML-powered aesthetic filters.",
          "Competitor feature driving 30% engagement", 15000, "users", 3, 60, 21),
    _item("I5", "Offline mode",
          "Cache content for offline viewing.",
          "", 3000, "users", 2, 70, 13),
    _item("I6", "Referral program",
          "Invite friends, earn rewards.",
          "", 5000, "users", 3, 75, 13),
]

SAMPLES: Dict[str, List[Dict[str, Any]]] = {
    "saas": SAMPLE_SAAS,
    "consumer": SAMPLE_CONSUMER,
}


def build_sample_request(name: str = "saas", timeframe: str = "month", effort_unit: str = "days") -> Dict[str, Any]:
    """
    Full score request for a named sample.

    Raises:
        KeyError: unknown sample name
    """
    items = deepcopy(SAMPLES[name])
    for it in items:
        it["inputs"]["reach"]["timeframe"] = timeframe
    return {"timeframe": timeframe, "effortUnit": effort_unit, "items": items}
