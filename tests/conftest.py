import os

from hypothesis import settings

settings.register_profile("dev", max_examples=50, deadline=None)
settings.register_profile("ci", max_examples=500, deadline=None)
settings.load_profile(os.getenv("PHYLOREFCHECK_HYPOTHESIS_PROFILE", "dev"))
