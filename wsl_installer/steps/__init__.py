from .step_10_enable_features import EnableOSFeaturesStep
from .step_20_install_runtime import InstallSubsystemRuntimeStep
from .step_30_install_distribution import InstallDistributionStep
from .step_40_install_app import InstallLanguageRuntimeAndAppStep

__all__ = [
    "EnableOSFeaturesStep",
    "InstallSubsystemRuntimeStep",
    "InstallDistributionStep",
    "InstallLanguageRuntimeAndAppStep",
]
