"""
Core synthetic data generators for risk profiles and claims history.

Design goals:
- Every individual draws from its own random stream derived from
  (seed, stream, index), so a record never depends on its neighbours,
  on population size or on generation order.
- Samplers run in a fixed order and draw in a fixed order; reordering
  draws changes the stream and breaks reproducibility.
- Health, financial, behavioral and property factors are correlated
  through age, education, occupation and home ownership.
- Claim counts are Poisson with a rate increasing in the overall score.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

import numpy as np
import pandas as pd

from . import config
from .config import GeneratorConfig
from .schemas import (
    BehavioralFactors,
    ClaimRecord,
    Demographics,
    FinancialFactors,
    HealthFactors,
    PropertyFactors,
    claims_frame,
    flatten,
    profiles_frame,
)
from .scoring import claim_rate, score_profile, summarize_by_category

logger = logging.getLogger(__name__)


# ---------------- Utility helpers ---------------- #

def individual_rng(seed: int, index: int, stream: int = config.STREAM_PROFILE) -> np.random.Generator:
    """Random stream for one individual; a pure function of its arguments."""
    return np.random.default_rng([seed, stream, index])


def individual_id(index: int) -> str:
    return f"{config.ID_PREFIX}{index + 1:05d}"


def individual_index(ind_id: str) -> int:
    """Inverse of ``individual_id``."""
    if not ind_id.startswith(config.ID_PREFIX):
        raise ValueError(f"not an individual id: {ind_id!r}")
    return int(ind_id[len(config.ID_PREFIX):]) - 1


def _pick(rng: np.random.Generator, table: dict[str, float]) -> str:
    labels = list(table)
    return labels[rng.choice(len(labels), p=list(table.values()))]


def _bernoulli(rng: np.random.Generator, p: float) -> int:
    return int(rng.random() < p)


def _poisson(rng: np.random.Generator, lam: float) -> int:
    return int(rng.poisson(lam))


def _sigmoid(x: float) -> float:
    # Always in (0, 1): no clamping needed before a Bernoulli draw
    return float(1.0 / (1.0 + np.exp(-x)))


def _clip(value: float, bounds: tuple[float, float]) -> float:
    return float(np.clip(value, *bounds))


def _random_dates(n: int, start: date, end: date, rng: np.random.Generator) -> list[date]:
    """Uniform dates over every day of [start, end]."""
    delta_days = (end - start).days
    return [
        start + timedelta(days=int(d))
        for d in rng.integers(0, delta_days, size=n, endpoint=True)
    ]


def _years_before(day: date, years: int) -> date:
    return (pd.Timestamp(day) - pd.DateOffset(years=years)).date()


# ---------------- Demographics ---------------- #

def sample_demographics(rng: np.random.Generator, index: int) -> Demographics:
    # Clamping piles the normal's tails onto 18 and 90
    age = int(round(rng.normal(config.AGE_MEAN, config.AGE_SD)))
    age = min(config.AGE_MAX, max(config.AGE_MIN, age))

    return Demographics(
        individual_id=individual_id(index),
        age=age,
        gender=_pick(rng, config.GENDER),
        marital_status=_pick(rng, config.MARITAL_STATUS),
        education_level=_pick(rng, config.EDUCATION_LEVEL),
        occupation_category=_pick(rng, config.OCCUPATION_CATEGORY),
        geographic_region=_pick(rng, config.GEOGRAPHIC_REGION),
        urban_rural=_pick(rng, config.URBAN_RURAL),
    )


# ---------------- Health ---------------- #

def _smoking_table(age: int) -> dict[str, float]:
    for upper, table in config.SMOKING_BY_AGE:
        if upper is None or age < upper:
            return table
    raise config.ConfigError(f"no smoking table covers age {age}; the last bucket must be open")


def sample_health(rng: np.random.Generator, demo: Demographics) -> HealthFactors:
    """Vitals trend with age; comorbidities follow logistic links.

    Heart disease uses the realised diabetes draw, so diabetes must be drawn
    first.
    """
    age = demo.age

    bmi = _clip(22 + (age - 30) * 0.08 + rng.normal(0, 3), config.BMI_RANGE)
    systolic_bp = _clip(110 + (age - 30) * 0.5 + rng.normal(0, 10), config.SYSTOLIC_BP_RANGE)
    ldl = _clip(100 + (age - 30) * 0.8 + rng.normal(0, 25), config.LDL_RANGE)

    smoking = _pick(rng, _smoking_table(age))
    alcohol = _pick(rng, config.ALCOHOL_CONSUMPTION)
    exercise = _pick(rng, config.EXERCISE_FREQUENCY)

    diabetes = _bernoulli(rng, _sigmoid(-3 + 0.05 * age + 0.1 * (bmi - 25)))
    hypertension = _bernoulli(rng, _sigmoid(-4 + 0.06 * age + 0.05 * systolic_bp))
    heart_disease = _bernoulli(rng, _sigmoid(-5 + 0.04 * age + 0.8 * diabetes))

    conditions = diabetes + hypertension + heart_disease

    return HealthFactors(
        bmi=bmi,
        systolic_bp=systolic_bp,
        cholesterol_ldl=ldl,
        smoking_status=smoking,
        alcohol_consumption=alcohol,
        exercise_frequency=exercise,
        diabetes=diabetes,
        hypertension=hypertension,
        heart_disease=heart_disease,
        doctor_visits_annual=_poisson(rng, 2 + 0.5 * conditions),
        hospitalizations_5yr=_poisson(rng, 0.3 + 0.5 * conditions),
        num_prescriptions=_poisson(rng, 1 + age / 20 + 2 * conditions),
    )


# ---------------- Financial ---------------- #

def sample_financial(rng: np.random.Generator, demo: Demographics) -> FinancialFactors:
    """Income from education then occupation; debt, assets and credit history."""
    age = demo.age

    mean, sd = config.INCOME_BY_EDUCATION[demo.education_level]
    income = max(config.INCOME_FLOOR, rng.normal(mean, sd))
    income *= config.OCCUPATION_INCOME_MULTIPLIER.get(demo.occupation_category, 1.0)

    lo, hi = config.CREDIT_SCORE_RANGE
    credit_score = int(min(hi, max(lo, round(rng.normal(700, 80)))))

    total_debt = max(0.0, rng.normal(50_000, 40_000))
    mortgage = max(0.0, rng.normal(180_000, 120_000)) if age > config.MORTGAGE_MIN_AGE else 0.0
    auto_loan = max(0.0, rng.normal(15_000, 12_000))
    card_debt = max(0.0, rng.normal(8_000, 6_000))

    dti = min(config.DTI_MAX, (total_debt / config.DTI_DEBT_DIVISOR) / (income + 1))

    liquid = max(0.0, rng.normal(income * 0.5, income * 0.4))
    retirement = max(0.0, (age - 25) * income * 0.08 * rng.uniform(0.5, 1.5))
    home_value = mortgage * rng.uniform(1.2, 2.0) if mortgage > 0 else 0.0

    late = _poisson(rng, max(0.0, (750 - credit_score) / 100))
    bankruptcy = _bernoulli(rng, _sigmoid(-4 + (700 - credit_score) / 150))

    return FinancialFactors(
        annual_income=float(income),
        credit_score=credit_score,
        total_debt=float(total_debt),
        mortgage_debt=float(mortgage),
        auto_loan_balance=float(auto_loan),
        credit_card_debt=float(card_debt),
        dti_ratio=float(dti),
        liquid_assets=float(liquid),
        retirement_savings=float(retirement),
        home_value=float(home_value),
        num_late_payments_2yr=late,
        bankruptcy_history=bankruptcy,
        years_current_employer=float(max(0.0, rng.normal(5, 3))),
        employment_gaps_5yr=_poisson(rng, 0.3),
    )


# ---------------- Behavioral ---------------- #

def sample_behavioral(rng: np.random.Generator, demo: Demographics) -> BehavioralFactors:
    years_licensed = max(0, demo.age - 16)

    mean, sd = config.MILES_BY_AREA[demo.urban_rural]
    miles = max(config.MILES_FLOOR, rng.normal(mean, sd))

    accidents = _poisson(rng, 0.15 * miles / 10_000)
    tickets = _poisson(rng, 0.25 * miles / 10_000)
    dui = _bernoulli(rng, config.RISK_FLAG_RATES["dui_history"])

    years_insured = max(0.0, years_licensed - rng.uniform(0, 2))
    lapses = _poisson(rng, 0.2)
    prior_claims = _poisson(rng, 0.4)

    flags = {
        name: _bernoulli(rng, config.RISK_FLAG_RATES[name])
        for name in (
            "extreme_sports",
            "frequent_travel",
            "hazardous_hobby",
            "security_system_home",
            "alarm_system_vehicle",
            "safety_course_completed",
        )
    }

    return BehavioralFactors(
        years_licensed=years_licensed,
        miles_driven_annual=float(miles),
        accidents_5yr=accidents,
        tickets_5yr=tickets,
        dui_history=dui,
        years_insured=float(years_insured),
        coverage_lapses_5yr=lapses,
        prior_claims_count=prior_claims,
        **flags,
    )


# ---------------- Property ---------------- #

def sample_property(rng: np.random.Generator, financial: FinancialFactors) -> PropertyFactors:
    """Home attributes exist only for individuals with a home value."""
    home_age: Optional[int] = None
    sqft: Optional[float] = None
    construction: Optional[str] = None
    roof_age: Optional[int] = None

    if financial.home_value > 0:
        home_age = int(rng.integers(1, config.HOME_AGE_MAX_YEARS, endpoint=True))
        sqft = float(max(config.HOME_SQFT_FLOOR, rng.normal(2_000, 600)))
        construction = _pick(rng, config.CONSTRUCTION_TYPE)
        roof_age = int(rng.integers(1, config.ROOF_AGE_MAX_YEARS, endpoint=True))

    return PropertyFactors(
        home_age_years=home_age,
        home_sqft=sqft,
        construction_type=construction,
        roof_age_years=roof_age,
        flood_zone=_pick(rng, config.FLOOD_ZONE),
        earthquake_zone=_pick(rng, config.EARTHQUAKE_ZONE),
        wildfire_risk=_pick(rng, config.WILDFIRE_RISK),
        crime_rate_area=_pick(rng, config.CRIME_RATE_AREA),
        property_claims_10yr=_poisson(rng, 0.3),
        water_damage_claims=_poisson(rng, 0.15),
        theft_claims=_poisson(rng, 0.10),
    )


# ---------------- Profiles ---------------- #

def generate_profile(seed: int, index: int) -> dict:
    """One fully scored profile record."""
    rng = individual_rng(seed, index, config.STREAM_PROFILE)

    demo = sample_demographics(rng, index)
    health = sample_health(rng, demo)
    financial = sample_financial(rng, demo)
    behavioral = sample_behavioral(rng, demo)
    prop = sample_property(rng, financial)

    record = flatten(demo, health, financial, behavioral, prop)
    record.update(flatten(score_profile(record)))
    return record


def generate_profiles(n: int, seed: int = config.SEED) -> pd.DataFrame:
    """Generate ``n`` scored risk profiles, sorted by individual_id."""
    GeneratorConfig(n_individuals=n, seed=seed).validate()
    logger.info("Generating %d risk profiles (seed=%d)", n, seed)
    records = [generate_profile(seed, i) for i in range(n)]
    return profiles_frame(records)


# ---------------- Claims ---------------- #

def sample_claims(
    rng: np.random.Generator,
    ind_id: str,
    overall_score: float,
    as_of: date,
) -> list[ClaimRecord]:
    """Claim history for one individual over the trailing window."""
    n_claims = _poisson(rng, claim_rate(overall_score))
    if n_claims == 0:
        return []

    start = _years_before(as_of, config.CLAIM_HISTORY_YEARS)
    dates = _random_dates(n_claims, start, as_of, rng)
    types = [_pick(rng, config.CLAIM_TYPE) for _ in range(n_claims)]
    amounts = np.maximum(
        config.CLAIM_AMOUNT_FLOOR,
        rng.normal(config.CLAIM_AMOUNT_MEAN, config.CLAIM_AMOUNT_SD, size=n_claims),
    )
    statuses = [_pick(rng, config.CLAIM_STATUS) for _ in range(n_claims)]

    drawn = sorted(zip(dates, types, amounts, statuses), key=lambda c: c[0])
    return [
        ClaimRecord(
            claim_id=f"{ind_id}_C{seq:02d}",
            individual_id=ind_id,
            claim_date=claim_date,
            claim_type=claim_type,
            claim_amount=float(amount),
            claim_status=status,
        )
        for seq, (claim_date, claim_type, amount, status) in enumerate(drawn, start=1)
    ]


def generate_claims(
    profiles: pd.DataFrame,
    seed: int = config.SEED,
    as_of: Optional[date] = None,
) -> pd.DataFrame:
    """Generate claims for every profile from its overall risk score.

    Only ``individual_id`` and ``overall_risk_score`` are read, so claims
    can be regenerated from a saved profiles table.
    """
    as_of = as_of or date.today()
    GeneratorConfig(seed=seed, as_of=as_of).validate()

    claims: list[ClaimRecord] = []
    for ind_id, overall in zip(profiles["individual_id"], profiles["overall_risk_score"]):
        rng = individual_rng(seed, individual_index(ind_id), config.STREAM_CLAIMS)
        claims.extend(sample_claims(rng, ind_id, float(overall), as_of))

    logger.info("Generated %d claims for %d individuals", len(claims), len(profiles))
    return claims_frame(claims)


# ---------------- Dataset entrypoint ---------------- #

@dataclass
class RiskDataset:
    settings: GeneratorConfig
    profiles: pd.DataFrame
    claims: pd.DataFrame
    summary: pd.DataFrame


def generate_dataset(cfg: Optional[GeneratorConfig] = None) -> RiskDataset:
    """
    Generate the full dataset: profiles, claims and the category summary.

    The configuration is validated before any random number is drawn.
    """
    cfg = (cfg or GeneratorConfig()).validate()

    profiles = generate_profiles(cfg.n_individuals, cfg.seed)
    claims = generate_claims(profiles, cfg.seed, cfg.as_of)
    summary = summarize_by_category(profiles)

    return RiskDataset(settings=cfg, profiles=profiles, claims=claims, summary=summary)
