"""Test package for the math trainer.

Core tests drive the generators, the session tracker, the history store and
the statistics with seeded ``random.Random`` instances and a fake clock.  UI
and worksheet-rendering tests run headlessly using pygame's dummy video
driver.  To run these tests, execute ``pytest`` from the project root.
"""
