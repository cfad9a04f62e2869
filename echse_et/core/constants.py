"""Physical constants and fixed coefficients for the ECHSE tools."""

# ============================================================================
# RADIATION CONSTANTS
# ============================================================================

# Stefan-Boltzmann constant (W/m²/K⁴), value used by the ECHSE engines
STEFAN_BOLTZMANN = 5.670367e-8

# ============================================================================
# TEMPERATURE CONSTANTS
# ============================================================================

FREEZING_POINT = 273.15

# ============================================================================
# EMISSIVITY COEFFICIENTS
# ============================================================================

# Brunt (1932) net emissivity coefficients, vapour pressure in kPa
BRUNT_A = 0.34
BRUNT_B = -0.14

# Idso & Jackson (1969), modified by Maidment (1993)
IDSO_OFFSET = -0.02
IDSO_SCALE = 0.261
IDSO_EXPONENT = -7.77e-4

# Magnus equation (Dyck & Peschke), result in hPa
MAGNUS_BASE = 6.11
MAGNUS_A = 7.5
MAGNUS_B = 237.3

# Cloudiness correction suggested by Shuttleworth in Maidment (1993)
MAIDMENT_FCORR_B = -0.35

# ============================================================================
# CONVERSION FACTORS
# ============================================================================

HPA_TO_KPA = 0.1

__all__ = [
    'STEFAN_BOLTZMANN', 'FREEZING_POINT',
    'BRUNT_A', 'BRUNT_B', 'IDSO_OFFSET', 'IDSO_SCALE', 'IDSO_EXPONENT',
    'MAGNUS_BASE', 'MAGNUS_A', 'MAGNUS_B', 'MAIDMENT_FCORR_B', 'HPA_TO_KPA'
]
