"""
Schema definitions for the synthetic risk profile tables.

These schemas define the **contract** between:
- data generation (each sampler returns one of these groups)
- the quality gate run before anything is written
- downstream consumers reading the CSV snapshots

A profile row is the concatenation of the groups below, in declaration
order, followed by the score fields.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import date
from typing import Optional

import numpy as np
import pandas as pd

from . import config


# ---------------- Demographics ---------------- #

@dataclass
class Demographics:
    individual_id: str
    age: int
    gender: str
    marital_status: str
    education_level: str
    occupation_category: str
    geographic_region: str
    urban_rural: str    # Urban / Suburban / Rural


# ---------------- Health ---------------- #

@dataclass
class HealthFactors:
    bmi: float
    systolic_bp: float
    cholesterol_ldl: float
    smoking_status: str         # Never / Former / Current
    alcohol_consumption: str    # None / Light / Moderate / Heavy
    exercise_frequency: str
    diabetes: int
    hypertension: int
    heart_disease: int
    doctor_visits_annual: int
    hospitalizations_5yr: int
    num_prescriptions: int


# ---------------- Financial ---------------- #

@dataclass
class FinancialFactors:
    annual_income: float
    credit_score: int
    total_debt: float
    mortgage_debt: float
    auto_loan_balance: float
    credit_card_debt: float
    dti_ratio: float
    liquid_assets: float
    retirement_savings: float
    home_value: float           # 0.0 when there is no mortgaged home
    num_late_payments_2yr: int
    bankruptcy_history: int
    years_current_employer: float
    employment_gaps_5yr: int


# ---------------- Behavioral ---------------- #

@dataclass
class BehavioralFactors:
    years_licensed: int
    miles_driven_annual: float
    accidents_5yr: int
    tickets_5yr: int
    dui_history: int
    years_insured: float
    coverage_lapses_5yr: int
    prior_claims_count: int
    extreme_sports: int
    frequent_travel: int
    hazardous_hobby: int
    security_system_home: int
    alarm_system_vehicle: int
    safety_course_completed: int


# ---------------- Property ---------------- #

@dataclass
class PropertyFactors:
    # Home group: all None when the individual has no home
    home_age_years: Optional[int]
    home_sqft: Optional[float]
    construction_type: Optional[str]
    roof_age_years: Optional[int]
    flood_zone: str
    earthquake_zone: str
    wildfire_risk: str
    crime_rate_area: str
    property_claims_10yr: int
    water_damage_claims: int
    theft_claims: int


# ---------------- Scores ---------------- #

@dataclass
class RiskScores:
    health_risk_score: float
    financial_risk_score: float
    driving_risk_score: float
    property_risk_score: float
    overall_risk_score: float
    risk_category: str


# ---------------- Claim ---------------- #

@dataclass
class ClaimRecord:
    claim_id: str
    individual_id: str
    claim_date: date
    claim_type: str     # Health / Auto / Property / Life
    claim_amount: float
    claim_status: str   # Paid / Denied / Pending


# ---------------- Column orders ---------------- #

PROFILE_GROUPS = (
    Demographics,
    HealthFactors,
    FinancialFactors,
    BehavioralFactors,
    PropertyFactors,
    RiskScores,
)

PROFILE_COLUMNS: list[str] = [f.name for group in PROFILE_GROUPS for f in fields(group)]
CLAIM_COLUMNS: list[str] = [f.name for f in fields(ClaimRecord)]
SCORE_COLUMNS: list[str] = [f.name for f in fields(RiskScores) if f.name != "risk_category"]
HOME_COLUMNS = ["home_age_years", "home_sqft", "construction_type", "roof_age_years"]

SUMMARY_COLUMNS = [
    "risk_category",
    "count",
    "avg_age",
    "avg_health_risk",
    "avg_financial_risk",
    "avg_driving_risk",
    "avg_property_risk",
    "avg_overall_risk",
]


def flatten(*groups) -> dict:
    """Merge dataclass groups into one flat profile record."""
    record: dict = {}
    for group in groups:
        record.update(asdict(group))
    return record


def risk_category_dtype() -> pd.CategoricalDtype:
    return pd.CategoricalDtype(categories=list(config.RISK_CATEGORIES), ordered=True)


def _id_order(col: pd.Series) -> pd.Series:
    # Ids widen past five digits; order by the number, not the string
    if col.name != "individual_id":
        return col
    return col.str.slice(len(config.ID_PREFIX)).astype("int64")


def profiles_frame(records: list[dict]) -> pd.DataFrame:
    """Build the profiles table with stable column order and dtypes."""
    df = pd.DataFrame.from_records(records, columns=PROFILE_COLUMNS)
    df["home_age_years"] = df["home_age_years"].astype("Int64")
    df["roof_age_years"] = df["roof_age_years"].astype("Int64")
    df["home_sqft"] = df["home_sqft"].astype("float64")
    df["risk_category"] = df["risk_category"].astype(risk_category_dtype())
    return df.sort_values("individual_id", key=_id_order, kind="stable").reset_index(drop=True)


def claims_frame(claims: list[ClaimRecord]) -> pd.DataFrame:
    """Build the claims table; keeps its columns even when empty."""
    if not claims:
        return pd.DataFrame(columns=CLAIM_COLUMNS)
    df = pd.DataFrame([asdict(c) for c in claims], columns=CLAIM_COLUMNS)
    df = df.sort_values(["individual_id", "claim_date"], key=_id_order, kind="stable")
    return df.reset_index(drop=True)


# ---------------- Quality gate ---------------- #

class DatasetValidationError(Exception):
    """Raised when a generated table breaks one of its invariants."""


RANGE_CHECKS = {
    "age": (config.AGE_MIN, config.AGE_MAX),
    "bmi": config.BMI_RANGE,
    "systolic_bp": config.SYSTOLIC_BP_RANGE,
    "cholesterol_ldl": config.LDL_RANGE,
    "credit_score": config.CREDIT_SCORE_RANGE,
    "dti_ratio": (0.0, config.DTI_MAX),
    **{col: config.SCORE_RANGE for col in SCORE_COLUMNS},
}


def validate_dataset(profiles: pd.DataFrame, claims: pd.DataFrame) -> None:
    """Check every table invariant and raise on the first group of failures."""
    errors: list[str] = []

    ids = profiles["individual_id"]
    if not ids.is_unique:
        errors.append("individual_id values are not unique")
    expected = [f"{config.ID_PREFIX}{i:05d}" for i in range(1, len(profiles) + 1)]
    if set(ids) != set(expected):
        errors.append("individual_id values do not form a dense sequence")

    for col, (lo, hi) in RANGE_CHECKS.items():
        bad = ~profiles[col].between(lo, hi)
        if bad.any():
            errors.append(f"{col}: {int(bad.sum())} values outside [{lo}, {hi}]")

    # Imported lazily: scoring imports this module
    from .scoring import categorize

    implied = profiles["overall_risk_score"].map(categorize)
    if (implied != profiles["risk_category"].astype(str)).any():
        errors.append("risk_category disagrees with overall_risk_score")

    has_home = profiles["home_value"] > 0
    home_null = profiles[HOME_COLUMNS].isna()
    if (home_null.any(axis=1) & has_home).any() or (~home_null.all(axis=1) & ~has_home).any():
        errors.append("home fields must be present exactly when home_value > 0")

    if len(claims) > 0:
        if not claims["claim_id"].is_unique:
            errors.append("claim_id values are not unique")
        orphans = ~claims["individual_id"].isin(ids)
        if orphans.any():
            errors.append(f"{int(orphans.sum())} claims reference unknown individuals")
        if not np.all(claims["claim_amount"] >= config.CLAIM_AMOUNT_FLOOR):
            errors.append("claim_amount below floor")

    if errors:
        raise DatasetValidationError("; ".join(errors))
