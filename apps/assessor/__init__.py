"""
Assessor App - Patient Risk Assessment Batch Job

Responsibilities:
- Paginated patient fetch from the assessment API (page/limit, polite delay)
- Exponential backoff retry strategy (5 attempts on 429/500/503 and transport errors)
- Per-field risk scoring (blood pressure, temperature, age)
- Alert classification: high-risk, fever, data-quality issues
- Submission of the sorted, deduplicated report

Output:
- POST /submit-assessment with {high_risk_patients, fever_patients, data_quality_issues}
"""
