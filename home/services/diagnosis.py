"""Keyword-based stand-in for an AI diagnosis of a new ticket."""

import random
import re
from dataclasses import dataclass

from pydantic import BaseModel


class Diagnosis(BaseModel):
    issue_type: str
    description: str
    possible_solutions: list[str]

    def render(self) -> str:
        steps = "\n".join(f"- {s}" for s in self.possible_solutions)
        return f"{self.issue_type}: {self.description}\n{steps}"


@dataclass(frozen=True)
class _Profile:
    issue_type: str
    category_hint: str
    keywords: tuple[str, ...]
    descriptions: tuple[str, ...]
    solutions: tuple[str, ...]


PROFILES = (
    _Profile(
        issue_type="Plumbing",
        category_hint="plumbing",
        keywords=("leak", "water", "pipe", "faucet", "drain", "toilet"),
        descriptions=(
            "This appears to be a plumbing issue involving water flow or leakage. "
            "Common causes include worn seals, pipe corrosion, or blockages in the drainage system.",
            "The issue suggests a plumbing problem with water pressure, leaks, or drainage. "
            "Pipes, fixtures and connections should be inspected.",
        ),
        solutions=(
            "Inspect visible pipes and connections for leaks or water damage",
            "Check water pressure at affected fixtures; low pressure may indicate a blockage",
            "Test drain flow; slow drains suggest clogs that may need professional clearing",
            "Examine seals and gaskets on faucets and fixtures for wear",
            "Shut off the water supply to the affected area if the leak is severe",
        ),
    ),
    _Profile(
        issue_type="Electrical",
        category_hint="electrical",
        keywords=("electrical", "outlet", "power", "circuit", "fuse", "breaker", "wiring"),
        descriptions=(
            "This electrical issue may involve power supply problems, faulty wiring, or "
            "malfunctioning outlets. Electrical problems need careful diagnosis to stay safe.",
            "The symptoms point to circuit overload, wiring issues, or component failure. "
            "A professional evaluation is essential.",
        ),
        solutions=(
            "Check the breaker panel for tripped breakers and reset if safe",
            "Test outlets with a voltage tester to find dead circuits",
            "Inspect visible wiring for damage, fraying, or overheating",
            "Unplug devices on the affected circuit to rule out overload",
            "Press the reset button on any GFCI outlets",
        ),
    ),
    _Profile(
        issue_type="HVAC",
        category_hint="hvac",
        keywords=("hvac", "heating", "cooling", "thermostat", "furnace", "air conditioning"),
        descriptions=(
            "This HVAC issue likely involves heating, cooling, or air circulation. Common "
            "causes include clogged filters, thermostat faults, or failed components.",
            "The problem affects temperature control or air quality; airflow restrictions "
            "or refrigerant problems are typical causes.",
        ),
        solutions=(
            "Replace or clean the air filters",
            "Check thermostat mode, set point and batteries",
            "Make sure vents and registers are open and unobstructed",
            "Check the outdoor unit for debris or ice buildup",
            "Verify the HVAC breakers are not tripped",
        ),
    ),
    _Profile(
        issue_type="Appliance",
        category_hint="appliance",
        keywords=("appliance", "refrigerator", "fridge", "dishwasher", "washer", "dryer", "oven", "stove", "microwave"),
        descriptions=(
            "This appliance issue may involve mechanical failure, electrical problems, or "
            "operational faults. Repairs often need model-specific parts.",
            "The appliance problem likely relates to power supply or component wear; a "
            "diagnosis should come before any repair attempt.",
        ),
        solutions=(
            "Confirm the appliance is plugged in and the outlet works",
            "Follow the troubleshooting steps in the user manual",
            "Look for visible damage, leaks, or unusual sounds during operation",
            "Clean filters and vents as the manufacturer recommends",
            "Note any error codes or indicator lights",
        ),
    ),
)

GENERIC_DESCRIPTIONS = (
    "This maintenance issue needs a professional assessment to find the root cause.",
    "The problem would benefit from an expert evaluation before repair.",
)


def _mentions(text: str, keywords: tuple[str, ...]) -> bool:
    return any(re.search(rf"\b{re.escape(k)}", text) for k in keywords)


def diagnose(title: str, description: str, category: str) -> Diagnosis:
    """
    Pick a diagnosis profile from the category first, then keywords in the
    title and description. The same ticket text always yields the same result.
    """
    text = f"{title} {description}".lower()
    lowered_category = category.lower()
    rng = random.Random(f"{title}|{description}|{category}")

    for profile in PROFILES:
        if profile.category_hint in lowered_category or _mentions(text, profile.keywords):
            return Diagnosis(
                issue_type=profile.issue_type,
                description=rng.choice(profile.descriptions),
                possible_solutions=rng.sample(profile.solutions, 3),
            )

    return Diagnosis(
        issue_type=category.strip().capitalize() or "General",
        description=rng.choice(GENERIC_DESCRIPTIONS),
        possible_solutions=[
            "Document the issue with photos and notes for the contractor",
            "Check whether the issue is covered by a warranty or service agreement",
            f"Contact a contractor specializing in {category.strip() or 'general repairs'}",
        ],
    )
