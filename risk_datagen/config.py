"""
Configuration for synthetic risk profile generation.

Category tables, score weights and thresholds are fixed so that a given
seed always reproduces the same population. All values are plain module
constants; the only run-time knobs are collected in ``GeneratorConfig``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

# ---------------- Population & seed ---------------- #

N_INDIVIDUALS: int = 2_000
SEED: int = 42

# Seeds must fit an unsigned 63-bit integer so they survive CSV/JSON round trips
MAX_SEED: int = 2**63

# Independent per-individual random streams
STREAM_PROFILE: int = 0
STREAM_CLAIMS: int = 1

ID_PREFIX: str = "IND"


# ---------------- Demographics ---------------- #

AGE_MEAN: float = 42.0
AGE_SD: float = 15.0
AGE_MIN: int = 18
AGE_MAX: int = 90

GENDER = {"Male": 0.49, "Female": 0.49, "Non-Binary": 0.02}

MARITAL_STATUS = {"Single": 0.35, "Married": 0.45, "Divorced": 0.15, "Widowed": 0.05}

EDUCATION_LEVEL = {
    "High School": 0.25,
    "Associate": 0.15,
    "Bachelor": 0.35,
    "Master": 0.20,
    "Doctorate": 0.05,
}

OCCUPATION_CATEGORY = {
    "Professional": 0.15,
    "Management": 0.12,
    "Service": 0.15,
    "Sales": 0.10,
    "Technical": 0.12,
    "Administrative": 0.10,
    "Labor": 0.08,
    "Retired": 0.08,
    "Student": 0.05,
    "Unemployed": 0.05,
}

GEOGRAPHIC_REGION = {
    "Northeast": 0.18,
    "Southeast": 0.22,
    "Midwest": 0.20,
    "Southwest": 0.15,
    "West": 0.15,
    "Pacific": 0.10,
}

URBAN_RURAL = {"Urban": 0.30, "Suburban": 0.50, "Rural": 0.20}


# ---------------- Health ---------------- #

BMI_RANGE = (16.0, 45.0)
SYSTOLIC_BP_RANGE = (90.0, 180.0)
LDL_RANGE = (50.0, 250.0)

# (upper age bound exclusive, distribution); last bucket catches the rest
SMOKING_BY_AGE = [
    (25, {"Never": 0.70, "Former": 0.10, "Current": 0.20}),
    (50, {"Never": 0.50, "Former": 0.30, "Current": 0.20}),
    (None, {"Never": 0.45, "Former": 0.40, "Current": 0.15}),
]

ALCOHOL_CONSUMPTION = {"None": 0.25, "Light": 0.40, "Moderate": 0.25, "Heavy": 0.10}

EXERCISE_FREQUENCY = {
    "Sedentary": 0.20,
    "Light": 0.25,
    "Moderate": 0.30,
    "Active": 0.15,
    "Very Active": 0.10,
}


# ---------------- Financial ---------------- #

# education -> (mean, sd) of annual income before occupation adjustment
INCOME_BY_EDUCATION = {
    "High School": (45_000, 15_000),
    "Associate": (55_000, 18_000),
    "Bachelor": (75_000, 25_000),
    "Master": (95_000, 30_000),
    "Doctorate": (120_000, 40_000),
}
INCOME_FLOOR: float = 20_000.0

OCCUPATION_INCOME_MULTIPLIER = {
    "Management": 1.3,
    "Professional": 1.3,
    "Retired": 0.4,
    "Student": 0.3,
    "Unemployed": 0.2,
}

CREDIT_SCORE_RANGE = (300, 850)
DTI_MAX: float = 2.0
# total_debt is scaled down before dividing by income
DTI_DEBT_DIVISOR: float = 10.0
MORTGAGE_MIN_AGE: int = 25
HOME_SQFT_FLOOR: float = 400.0


# ---------------- Behavioral ---------------- #

# urban/rural class -> (mean, sd) annual miles
MILES_BY_AREA = {
    "Urban": (8_000, 3_000),
    "Suburban": (12_000, 4_000),
    "Rural": (15_000, 5_000),
}
MILES_FLOOR: float = 1_000.0

RISK_FLAG_RATES = {
    "dui_history": 0.03,
    "extreme_sports": 0.08,
    "frequent_travel": 0.15,
    "hazardous_hobby": 0.05,
    "security_system_home": 0.45,
    "alarm_system_vehicle": 0.30,
    "safety_course_completed": 0.20,
}


# ---------------- Property ---------------- #

CONSTRUCTION_TYPE = {"Wood Frame": 0.50, "Brick": 0.25, "Concrete": 0.15, "Mixed": 0.10}
FLOOD_ZONE = {"None": 0.75, "Moderate": 0.15, "High": 0.10}
EARTHQUAKE_ZONE = {"None": 0.60, "Low": 0.20, "Moderate": 0.15, "High": 0.05}
WILDFIRE_RISK = {"None": 0.65, "Low": 0.20, "Moderate": 0.10, "High": 0.05}
CRIME_RATE_AREA = {"Low": 0.50, "Moderate": 0.35, "High": 0.15}

HOME_AGE_MAX_YEARS: int = 80
ROOF_AGE_MAX_YEARS: int = 30


# ---------------- Scoring ---------------- #

SCORE_RANGE = (0.0, 100.0)

SCORE_WEIGHTS = {
    "health": 0.30,
    "financial": 0.30,
    "driving": 0.25,
    "property": 0.15,
}

# Half-open buckets: [0,20) [20,40) [40,60) [60,80) [80,100]
RISK_BREAKPOINTS = (20.0, 40.0, 60.0, 80.0)
RISK_CATEGORIES = (
    "Minimal Risk",
    "Low Risk",
    "Moderate Risk",
    "High Risk",
    "Very High Risk",
)


# ---------------- Claims ---------------- #

CLAIM_HISTORY_YEARS: int = 5
CLAIM_BASE_PROBABILITY: float = 0.05
CLAIM_SCORE_DIVISOR: float = 200.0
CLAIM_RATE_MULTIPLIER: float = 3.0

CLAIM_TYPE = {"Health": 0.40, "Auto": 0.30, "Property": 0.20, "Life": 0.10}
CLAIM_STATUS = {"Paid": 0.75, "Denied": 0.15, "Pending": 0.10}

CLAIM_AMOUNT_MEAN: float = 5_000.0
CLAIM_AMOUNT_SD: float = 8_000.0
CLAIM_AMOUNT_FLOOR: float = 100.0


# ---------------- Outputs ---------------- #

DATASET_VERSION: str = "v1.0"
PROFILES_FILE: str = "synthetic-risk-profiles.csv"
CLAIMS_FILE: str = "synthetic-claims-history.csv"
SUMMARY_FILE: str = "synthetic-risk-summary.csv"
MANIFEST_FILE: str = "dataset_manifest.json"


# ---------------- Validation ---------------- #

class ConfigError(ValueError):
    """Raised for a configuration that cannot produce a dataset."""


def probability_tables() -> dict[str, dict[str, float]]:
    """All categorical tables keyed by a readable name."""
    tables = {
        "gender": GENDER,
        "marital_status": MARITAL_STATUS,
        "education_level": EDUCATION_LEVEL,
        "occupation_category": OCCUPATION_CATEGORY,
        "geographic_region": GEOGRAPHIC_REGION,
        "urban_rural": URBAN_RURAL,
        "alcohol_consumption": ALCOHOL_CONSUMPTION,
        "exercise_frequency": EXERCISE_FREQUENCY,
        "construction_type": CONSTRUCTION_TYPE,
        "flood_zone": FLOOD_ZONE,
        "earthquake_zone": EARTHQUAKE_ZONE,
        "wildfire_risk": WILDFIRE_RISK,
        "crime_rate_area": CRIME_RATE_AREA,
        "claim_type": CLAIM_TYPE,
        "claim_status": CLAIM_STATUS,
    }
    for upper, table in SMOKING_BY_AGE:
        bucket = f"<{upper}" if upper is not None else "rest"
        tables[f"smoking_status({bucket})"] = table
    return tables


def check_probability_tables(tol: float = 1e-9) -> None:
    """Raise ConfigError if any categorical table does not sum to 1."""
    if not SMOKING_BY_AGE or SMOKING_BY_AGE[-1][0] is not None:
        raise ConfigError("SMOKING_BY_AGE must end with an open (None) age bucket")
    for name, table in probability_tables().items():
        total = sum(table.values())
        if abs(total - 1.0) > tol:
            raise ConfigError(f"probabilities for {name} sum to {total}, expected 1")
        if any(p < 0 for p in table.values()):
            raise ConfigError(f"negative probability in {name}")


@dataclass(frozen=True)
class GeneratorConfig:
    """Run parameters: population size, seed and the generation date.

    ``as_of`` anchors the trailing claim window. Pin it to reproduce a
    dataset byte for byte on a later day.
    """

    n_individuals: int = N_INDIVIDUALS
    seed: int = SEED
    as_of: date = field(default_factory=date.today)

    def validate(self) -> "GeneratorConfig":
        n = self.n_individuals
        if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
            raise ConfigError(f"n_individuals must be a positive integer, got {n!r}")

        s = self.seed
        if isinstance(s, bool) or not isinstance(s, int) or not 0 <= s < MAX_SEED:
            raise ConfigError(f"seed must be an integer in [0, 2**63), got {s!r}")

        if not isinstance(self.as_of, date):
            raise ConfigError(f"as_of must be a date, got {self.as_of!r}")

        check_probability_tables()
        return self
