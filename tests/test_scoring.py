import numpy as np
import pandas as pd
import pytest

from risk_datagen import config
from risk_datagen.schemas import SUMMARY_COLUMNS
from risk_datagen.scoring import (
    categorize,
    claim_rate,
    driving_risk_score,
    financial_risk_score,
    health_risk_score,
    overall_risk_score,
    property_risk_score,
    score_profile,
    summarize_by_category,
)

HEALTHY = {
    "bmi": 22.0,
    "systolic_bp": 120.0,
    "cholesterol_ldl": 100.0,
    "smoking_status": "Never",
    "alcohol_consumption": "Light",
    "exercise_frequency": "Moderate",
    "diabetes": 0,
    "hypertension": 0,
    "heart_disease": 0,
    "hospitalizations_5yr": 0,
}

SOLVENT = {
    "credit_score": 850,
    "dti_ratio": 0.0,
    "num_late_payments_2yr": 0,
    "bankruptcy_history": 0,
    "employment_gaps_5yr": 0,
    "coverage_lapses_5yr": 0,
}

DRIVER = {
    "accidents_5yr": 0,
    "tickets_5yr": 0,
    "dui_history": 0,
    "coverage_lapses_5yr": 0,
    "miles_driven_annual": 10_000.0,
    "safety_course_completed": 0,
}

HOME = {
    "home_age_years": 20,
    "roof_age_years": 10,
    "flood_zone": "None",
    "earthquake_zone": "None",
    "wildfire_risk": "None",
    "crime_rate_area": "Low",
    "property_claims_10yr": 0,
    "security_system_home": 0,
}


def test_health_score_zero_at_reference_vitals():
    assert health_risk_score(HEALTHY) == pytest.approx(0.0)


def test_health_score_loadings():
    r = {**HEALTHY, "smoking_status": "Current", "diabetes": 1, "hospitalizations_5yr": 2}
    assert health_risk_score(r) == pytest.approx(20 + 15 + 10)
    assert health_risk_score({**HEALTHY, "smoking_status": "Former"}) == pytest.approx(10)
    assert health_risk_score({**HEALTHY, "bmi": 27.0, "systolic_bp": 130.0}) == pytest.approx(10 + 3)


def test_health_score_clamped():
    assert health_risk_score({**HEALTHY, "bmi": 16.0, "systolic_bp": 90.0}) == 0.0
    sick = {**HEALTHY, "bmi": 45.0, "smoking_status": "Current", "heart_disease": 1, "diabetes": 1}
    assert health_risk_score(sick) == 100.0


def test_financial_score_zero_for_perfect_credit():
    assert financial_risk_score(SOLVENT) == 0.0


def test_financial_score_terms():
    r = {**SOLVENT, "credit_score": 795, "dti_ratio": 0.5, "bankruptcy_history": 1}
    assert financial_risk_score(r) == pytest.approx(10 + 7.5 + 30)
    assert financial_risk_score({**SOLVENT, "credit_score": 300, "bankruptcy_history": 1}) == 100.0


def test_driving_score_terms():
    assert driving_risk_score(DRIVER) == pytest.approx(50.0)
    assert driving_risk_score({**DRIVER, "miles_driven_annual": 1_000.0, "safety_course_completed": 1}) == 0.0
    assert driving_risk_score({**DRIVER, "dui_history": 1, "accidents_5yr": 2}) == 100.0


def test_property_score_needs_a_home():
    exposed = {**HOME, "flood_zone": "High", "wildfire_risk": "High"}
    assert property_risk_score(exposed) == pytest.approx(10 + 8 + 20 + 18)
    for missing in (None, np.nan, pd.NA):
        assert property_risk_score({**exposed, "home_age_years": missing, "roof_age_years": missing}) == 0.0


def test_overall_uses_fixed_weights():
    assert overall_risk_score(100, 0, 0, 0) == pytest.approx(30.0)
    assert overall_risk_score(0, 100, 0, 0) == pytest.approx(30.0)
    assert overall_risk_score(0, 0, 100, 0) == pytest.approx(25.0)
    assert overall_risk_score(0, 0, 0, 100) == pytest.approx(15.0)
    assert overall_risk_score(100, 100, 100, 100) == pytest.approx(100.0)


@pytest.mark.parametrize(
    "score, expected",
    [
        (0.0, "Minimal Risk"),
        (19.999, "Minimal Risk"),
        (20.0, "Low Risk"),
        (39.999, "Low Risk"),
        (40.0, "Moderate Risk"),
        (59.999, "Moderate Risk"),
        (60.0, "High Risk"),
        (79.999, "High Risk"),
        (80.0, "Very High Risk"),
        (100.0, "Very High Risk"),
    ],
)
def test_category_breakpoints(score, expected):
    assert categorize(score) == expected


def test_categorize_is_monotonic():
    ranks = [config.RISK_CATEGORIES.index(categorize(s)) for s in np.linspace(0, 100, 1001)]
    assert ranks == sorted(ranks)


def test_score_profile_combines_dimensions():
    record = {**HEALTHY, **SOLVENT, **DRIVER, **HOME}
    scores = score_profile(record)
    assert scores.health_risk_score == pytest.approx(0.0)
    assert scores.financial_risk_score == 0.0
    assert scores.driving_risk_score == pytest.approx(50.0)
    assert scores.property_risk_score == pytest.approx(18.0)
    assert scores.overall_risk_score == pytest.approx(0.25 * 50 + 0.15 * 18)
    assert scores.risk_category == "Minimal Risk"


def test_claim_rate():
    assert claim_rate(0) == pytest.approx(0.15)
    assert claim_rate(100) == pytest.approx(1.65)
    rates = [claim_rate(s) for s in range(0, 101)]
    assert all(a < b for a, b in zip(rates, rates[1:]))


def test_generated_scores_in_range_and_consistent(dataset):
    df = dataset.profiles
    for col in (
        "health_risk_score",
        "financial_risk_score",
        "driving_risk_score",
        "property_risk_score",
        "overall_risk_score",
    ):
        assert df[col].between(0, 100).all(), col

    rescored = df.apply(lambda row: score_profile(row).overall_risk_score, axis=1)
    np.testing.assert_allclose(rescored, df["overall_risk_score"])
    assert (df["overall_risk_score"].map(categorize) == df["risk_category"].astype(str)).all()


def test_categories_match_pandas_binning(dataset):
    overall = dataset.profiles["overall_risk_score"]
    binned = pd.cut(
        overall,
        bins=[-np.inf, *config.RISK_BREAKPOINTS, np.inf],
        right=False,
        labels=list(config.RISK_CATEGORIES),
    )
    assert (binned.astype(str) == dataset.profiles["risk_category"].astype(str)).all()


def test_summary_has_five_ordered_rows(dataset):
    summary = dataset.summary
    assert list(summary.columns) == SUMMARY_COLUMNS
    assert list(summary["risk_category"].astype(str)) == list(config.RISK_CATEGORIES)
    assert summary["count"].sum() == len(dataset.profiles)

    for _, row in summary[summary["count"] > 0].iterrows():
        members = dataset.profiles[dataset.profiles["risk_category"] == row["risk_category"]]
        assert row["avg_age"] == pytest.approx(members["age"].mean())
        assert row["avg_overall_risk"] == pytest.approx(members["overall_risk_score"].mean())


def test_summary_keeps_empty_categories():
    profiles = pd.DataFrame(
        {
            "individual_id": ["IND00001", "IND00002"],
            "age": [30, 50],
            "health_risk_score": [10.0, 50.0],
            "financial_risk_score": [10.0, 50.0],
            "driving_risk_score": [10.0, 50.0],
            "property_risk_score": [10.0, 50.0],
            "overall_risk_score": [10.0, 50.0],
            "risk_category": ["Minimal Risk", "Moderate Risk"],
        }
    )
    summary = summarize_by_category(profiles)
    assert len(summary) == 5
    assert list(summary["count"]) == [1, 0, 1, 0, 0]
    assert summary.loc[1, "avg_age"] != summary.loc[1, "avg_age"]  # NaN
    assert summary.loc[2, "avg_overall_risk"] == pytest.approx(50.0)
