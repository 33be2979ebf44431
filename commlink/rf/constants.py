"""Physical constants and numerical limits shared by the RF models."""

# Physical constants
LIGHT_SPEED_M_S = 299_792_458.0  # Speed of light in m/s
LIGHT_SPEED_KM_S = LIGHT_SPEED_M_S / 1000.0
K_BOLTZMANN = 1.38e-23  # Boltzmann constant in J/K

# Free-space path loss with distance in km and frequency in MHz
FSPL_CONSTANT_DB = 32.45

# Thermal noise density at 290 K in dBm/Hz
THERMAL_NOISE_DENSITY_DBM_HZ = -174.0

# BER values are never reported as exactly 0 or 1
MIN_BER = 1e-10
MAX_BER = 0.5

# Wavelength (m) = 300 / f (MHz)
FREQ_WAVELENGTH_CONSTANT = 300.0
