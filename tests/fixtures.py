SAMPLE_RESUME = (
    "Jane Citizen\n"
    "jane@example.com | 0400 000 000\n"
    "\n"
    "Professional Summary\n"
    "Data analyst with 6 years of experience delivering Power BI dashboards that cut reporting time by 30%.\n"
    "\n"
    "Skills\n"
    "SQL, Power BI, Python, DAX, Excel\n"
    "\n"
    "Experience\n"
    "Senior Data Analyst, Acme Corp\n"
    "- Managed a team of 12 and reduced costs by 15% over 6 months\n"
    "- Developed automated SQL pipelines\n"
    "\n"
    "Education\n"
    "Bachelor of Science in Statistics, University of Sydney\n"
)

RESUME_WITHOUT_EDUCATION = (
    "Alex Analyst\n"
    "alex@example.com\n"
    "\n"
    "Summary\n"
    "Analyst with 4 years of experience building SQL reports.\n"
    "\n"
    "Skills\n"
    "SQL, Excel, Tableau\n"
    "\n"
    "Experience\n"
    "Analyst, Retail Co\n"
    "- Improved forecast accuracy by 10%\n"
)

LONG_RESUME = SAMPLE_RESUME.replace(
    "- Developed automated SQL pipelines\n",
    "- Developed automated SQL pipelines\n"
    + "- Partnered with finance stakeholders to deliver monthly reporting packs and automated data quality checks.\n"
    * 5,
)

DATA_JD = (
    "We are hiring a Data Analyst to join our insights team.\n"
    "Experience with: SQL, Power BI, Python, Kubernetes.\n"
    "A tertiary degree in statistics, mathematics or a related field is required.\n"
)
