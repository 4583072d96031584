"""
Applications - Runnable Jobs

- assessor: fetch patient vitals, classify alerts, submit the assessment
"""
