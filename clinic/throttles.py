"""Scoped throttles; rates live in ``REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']``."""
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


class SignupRateThrottle(AnonRateThrottle):
    scope = 'signup'


class AIRateThrottle(UserRateThrottle):
    scope = 'ai'
