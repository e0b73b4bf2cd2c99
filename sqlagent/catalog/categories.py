"""
Business categories and keyword hints for the Certainti schema.

Categories group the physical tables by business domain. The classifier
scores a question against each category's keywords; the table selector
uses KEYWORD_TABLE_MAP for direct hits before falling back to scoring.
"""

from types import MappingProxyType

from sqlagent.models.catalog import CategoryDefinition

GENERAL_CATEGORY = "General"

DEFAULT_CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(
        name="Company / Organization",
        tables=(
            "company", "platformconfig", "user_company_relations",
            "system_country_currency", "system_role", "system_status",
            "system_type", "system_survey_template", "countries",
            "platformusers", "permissions", "loginhistory",
        ),
        keywords=("company", "companies", "organization", "config", "system", "country", "currency", "platform", "user"),
    ),
    CategoryDefinition(
        name="Users / Teams",
        tables=(
            "contacts", "contacts_backup_20250211", "contactsalary",
            "teammembers", "teammembers_bkup20241029", "teammembers_stage",
            "platformusers", "permissions", "loginhistory",
            "recentlyviewed", "roles", "rolefeatures",
        ),
        keywords=("user", "contact", "team", "member", "role", "permission", "login", "salary", "employee"),
    ),
    CategoryDefinition(
        name="Projects",
        tables=(
            "projects", "projectmilestones", "portfolio_projects_rel", "portfolios",
            "projectfinancialdaily", "s_projects", "temp_projectlist",
            "master_case_project", "master_case_project_backup_20250219",
        ),
        keywords=("project", "milestone", "portfolio", "financial", "budget", "case"),
    ),
    CategoryDefinition(
        name="Timesheets",
        tables=(
            "timesheetdata", "timesheets", "timesheetsraw", "timesheettasks",
            "timesheettaskscache", "timesheetuploadlog", "x_timesheet",
            "s_teammembers",
        ),
        keywords=("timesheet", "time", "hours", "task", "upload", "raw", "effort"),
    ),
    CategoryDefinition(
        name="Reports / Summaries",
        tables=(
            "consolidated_summary", "mod_consolidated_summary", "reconciliations",
            "master_sheets", "master_sheets_data", "activitylogs", "alerts",
            "notes", "naggingdetails", "master_project_ai_summary",
            "master_project_ai_summary_sections", "master_project_ai_summary_source",
            "master_project_summarizer_logs", "master_project_summarizer_logs_bkup20241008",
        ),
        keywords=("summary", "summaries", "report", "consolidated", "reconciliation", "alert", "note", "activity", "sheet"),
    ),
    CategoryDefinition(
        name="AI / Interactions",
        tables=(
            "interactions", "interactions_artifacts", "interactions_sent",
            "master_ai_configurations", "master_ai_llm_logs", "master_ai_request",
            "master_ai_knowledge_base", "master_project_ai_assessment",
            "master_project_ai_interaction", "master_interactions", "master_interactions_qa",
        ),
        keywords=("ai", "interaction", "artifact", "llm", "assessment", "configuration", "knowledge"),
    ),
    CategoryDefinition(
        name="Cases",
        tables=("case", "master_case", "master_case_project", "master_case_project_backup_20250219"),
        keywords=("case", "legal", "issue", "claim"),
    ),
    CategoryDefinition(
        name="Documents",
        tables=("documents", "master_document_type_mapping"),
        keywords=("document", "file", "upload", "attachment", "doc"),
    ),
    CategoryDefinition(
        name="Surveys",
        tables=(
            "master_survey", "master_survey_answer", "master_survey_answer_batch",
            "master_survey_assignment", "master_survey_control",
            "system_survey_question", "get_survey_responses",
            "batchupload_survey_responses", "vw_survey",
            "master_survey_backup_20250219", "master_survey_bkup20241008",
            "master_survey_bkup20250129", "master_survey_answer_bkup20241008",
            "master_survey_answer_bkup20250129", "master_survey_control_backup_20250219",
            "master_survey_control_bkup20241008",
        ),
        keywords=("survey", "question", "answer", "response", "assignment", "batch"),
    ),
    CategoryDefinition(
        name="Financial / Dynamics",
        tables=(
            "projectfinancialdaily", "contactsalary", "trd365_account_fiscal",
            "trd365_accounts", "trd365_country", "trd365_project_fiscal",
            "trd365_project_fiscal_resources", "trd365_projects", "trd365_resources",
        ),
        keywords=("financial", "fiscal", "account", "salary", "cost", "revenue", "dynamics", "365"),
    ),
    CategoryDefinition(
        name="Mappings / Configurations",
        tables=(
            "mapping", "master_company_mail_configuration", "master_company_mapper",
            "master_mapper", "master_mapper_attributes", "workflow",
            "master_intent", "master_intent_framework", "master_intent_framework_company",
        ),
        keywords=("mapping", "mapper", "config", "workflow", "intent", "framework", "mail"),
    ),
)

# Ordered: every matching keyword contributes its tables, in this order.
KEYWORD_TABLE_MAP: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "company": ("company",),
        "companies": ("company",),
        "organization": ("company",),
        "project": ("projects",),
        "projects": ("projects",),
        "contact": ("contacts",),
        "contacts": ("contacts",),
        "user": ("contacts", "platformusers"),
        "users": ("contacts", "platformusers"),
        "team": ("teammembers",),
        "teams": ("teammembers",),
        "timesheet": ("timesheettasks", "timesheets"),
        "timesheets": ("timesheettasks", "timesheets"),
        "survey": ("master_survey", "master_survey_answer"),
        "surveys": ("master_survey", "master_survey_answer"),
        "summary": ("master_project_ai_summary", "consolidated_summary"),
        "summaries": ("master_project_ai_summary", "consolidated_summary"),
        "financial": ("projectfinancialdaily", "contactsalary"),
        "cost": ("projectfinancialdaily",),
        "salary": ("contactsalary",),
        "document": ("documents",),
        "documents": ("documents",),
        "case": ("master_case", "master_case_project"),
        "cases": ("master_case", "master_case_project"),
    }
)

