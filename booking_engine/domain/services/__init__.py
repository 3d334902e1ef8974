"""Pure domain services: pricing, availability, OTP policy and the state machine."""
