"""
Composite risk scoring.

Each dimension score is a fixed linear combination of that dimension's raw
attributes, clamped to [0, 100]. The overall score is the weighted sum of
the four clamped dimension scores and is therefore already in [0, 100].

All functions take a flat record mapping (a dict built from the schema
groups, or a pandas row), so they can score generated and hand-built
profiles alike.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Any, Mapping

import numpy as np
import pandas as pd

from . import config
from .schemas import SUMMARY_COLUMNS, RiskScores, risk_category_dtype


def _clamp(value: float, bounds: tuple[float, float] = config.SCORE_RANGE) -> float:
    lo, hi = bounds
    return float(min(hi, max(lo, value)))


def _has_home(record: Mapping[str, Any]) -> bool:
    value = record.get("home_age_years")
    return value is not None and not pd.isna(value)


# ---------------- Dimension scores ---------------- #

def health_risk_score(r: Mapping[str, Any]) -> float:
    """Deviation from healthy vitals plus lifestyle and history loadings."""
    score = (
        (r["bmi"] - 22) * 2
        + (r["systolic_bp"] - 120) * 0.3
        + (r["cholesterol_ldl"] - 100) * 0.2
        + (r["smoking_status"] == "Current") * 20
        + (r["smoking_status"] == "Former") * 10
        + (r["alcohol_consumption"] == "Heavy") * 15
        + (r["exercise_frequency"] == "Sedentary") * 10
        + r["diabetes"] * 15
        + r["hypertension"] * 12
        + r["heart_disease"] * 20
        + r["hospitalizations_5yr"] * 5
    )
    return _clamp(score)


def financial_risk_score(r: Mapping[str, Any]) -> float:
    score = (
        (850 - r["credit_score"]) / 5.5
        + r["dti_ratio"] * 15
        + r["num_late_payments_2yr"] * 5
        + r["bankruptcy_history"] * 30
        + r["employment_gaps_5yr"] * 8
        + r["coverage_lapses_5yr"] * 6
    )
    return _clamp(score)


def driving_risk_score(r: Mapping[str, Any]) -> float:
    score = (
        r["accidents_5yr"] * 15
        + r["tickets_5yr"] * 8
        + r["dui_history"] * 35
        + r["coverage_lapses_5yr"] * 10
        + r["miles_driven_annual"] / 200
        - r["safety_course_completed"] * 5
    )
    return _clamp(score)


def property_risk_score(r: Mapping[str, Any]) -> float:
    """Zero for individuals without a home."""
    if not _has_home(r):
        return 0.0
    score = (
        r["home_age_years"] * 0.5
        + r["roof_age_years"] * 0.8
        + (r["flood_zone"] == "High") * 20
        + (r["flood_zone"] == "Moderate") * 10
        + (r["earthquake_zone"] == "High") * 15
        + (r["wildfire_risk"] == "High") * 18
        + (r["crime_rate_area"] == "High") * 15
        + r["property_claims_10yr"] * 8
        - r["security_system_home"] * 5
    )
    return _clamp(score)


# ---------------- Composite ---------------- #

def overall_risk_score(health: float, financial: float, driving: float, prop: float) -> float:
    w = config.SCORE_WEIGHTS
    return float(
        health * w["health"]
        + financial * w["financial"]
        + driving * w["driving"]
        + prop * w["property"]
    )


def categorize(overall: float) -> str:
    """Bucket an overall score: [0,20) Minimal ... [80,100] Very High."""
    return config.RISK_CATEGORIES[bisect_right(config.RISK_BREAKPOINTS, overall)]


def score_profile(record: Mapping[str, Any]) -> RiskScores:
    health = health_risk_score(record)
    financial = financial_risk_score(record)
    driving = driving_risk_score(record)
    prop = property_risk_score(record)
    overall = overall_risk_score(health, financial, driving, prop)
    return RiskScores(
        health_risk_score=health,
        financial_risk_score=financial,
        driving_risk_score=driving,
        property_risk_score=prop,
        overall_risk_score=overall,
        risk_category=categorize(overall),
    )


def claim_rate(overall: float) -> float:
    """Poisson mean of the claim count; strictly increasing in ``overall``."""
    probability = overall / config.CLAIM_SCORE_DIVISOR + config.CLAIM_BASE_PROBABILITY
    return probability * config.CLAIM_RATE_MULTIPLIER


# ---------------- Summary ---------------- #

def summarize_by_category(profiles: pd.DataFrame) -> pd.DataFrame:
    """One row per risk category in fixed order, empty categories included."""
    category = profiles["risk_category"].astype(risk_category_dtype())
    grouped = profiles.assign(risk_category=category).groupby(
        "risk_category", observed=False, sort=True
    )
    summary = grouped.agg(
        count=("individual_id", "size"),
        avg_age=("age", "mean"),
        avg_health_risk=("health_risk_score", "mean"),
        avg_financial_risk=("financial_risk_score", "mean"),
        avg_driving_risk=("driving_risk_score", "mean"),
        avg_property_risk=("property_risk_score", "mean"),
        avg_overall_risk=("overall_risk_score", "mean"),
    ).reset_index()
    summary["count"] = summary["count"].astype(np.int64)
    return summary[SUMMARY_COLUMNS]
