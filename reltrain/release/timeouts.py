from __future__ import annotations

# Onboarding: the provisioned definition shows up some minutes after the build.
ONBOARDING_POLL_ATTEMPTS = 10
ONBOARDING_POLL_DELAY_SECONDS = 30.0

# Pull requests are not listed until the service has indexed them.
PR_SETTLE_SECONDS = 10.0

# Per socket operation; the service itself enforces no deadline.
HTTP_TIMEOUT_SECONDS = 60.0
