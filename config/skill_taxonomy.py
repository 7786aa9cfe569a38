"""Skill taxonomy used to recognize skills in recruiter search queries.

Each entry maps a canonical skill to the lowercase spellings recruiters type.
Keep synonyms specific: very short or common words cause false matches.
"""

SKILL_TAXONOMY = [
    # Languages
    {"canonical_skill": "JavaScript", "synonyms": ["javascript", "js", "ecmascript", "es6"], "category": "Language"},
    {"canonical_skill": "TypeScript", "synonyms": ["typescript", "ts"], "category": "Language"},
    {"canonical_skill": "Python", "synonyms": ["python", "python3"], "category": "Language"},
    {"canonical_skill": "Java", "synonyms": ["java", "jvm"], "category": "Language"},
    {"canonical_skill": "Go", "synonyms": ["golang"], "category": "Language"},
    {"canonical_skill": "Rust", "synonyms": ["rust", "rustlang"], "category": "Language"},
    {"canonical_skill": "C#", "synonyms": ["c#", "csharp", "c sharp"], "category": "Language"},
    {"canonical_skill": "C++", "synonyms": ["c++", "cpp"], "category": "Language"},
    {"canonical_skill": "Ruby", "synonyms": ["ruby"], "category": "Language"},
    {"canonical_skill": "PHP", "synonyms": ["php"], "category": "Language"},
    {"canonical_skill": "Kotlin", "synonyms": ["kotlin"], "category": "Language"},
    {"canonical_skill": "Swift", "synonyms": ["swift"], "category": "Language"},
    {"canonical_skill": "SQL", "synonyms": ["sql", "t-sql", "pl/sql"], "category": "Language"},

    # Frontend
    {"canonical_skill": "React", "synonyms": ["react", "reactjs", "react.js"], "category": "Frontend"},
    {"canonical_skill": "Next.js", "synonyms": ["next.js", "nextjs"], "category": "Frontend"},
    {"canonical_skill": "Vue.js", "synonyms": ["vue", "vuejs", "vue.js"], "category": "Frontend"},
    {"canonical_skill": "Angular", "synonyms": ["angular", "angularjs"], "category": "Frontend"},
    {"canonical_skill": "CSS", "synonyms": ["css", "css3", "tailwind", "sass"], "category": "Frontend"},

    # Backend
    {"canonical_skill": "Node.js", "synonyms": ["node.js", "nodejs", "node"], "category": "Backend"},
    {"canonical_skill": "Django", "synonyms": ["django"], "category": "Backend"},
    {"canonical_skill": "FastAPI", "synonyms": ["fastapi", "fast api"], "category": "Backend"},
    {"canonical_skill": "Spring", "synonyms": ["spring", "spring boot"], "category": "Backend"},
    {"canonical_skill": "GraphQL", "synonyms": ["graphql"], "category": "Backend"},
    {"canonical_skill": "REST API", "synonyms": ["rest api", "restful", "rest apis"], "category": "Backend"},

    # Data
    {"canonical_skill": "PostgreSQL", "synonyms": ["postgresql", "postgres"], "category": "Data"},
    {"canonical_skill": "MySQL", "synonyms": ["mysql", "mariadb"], "category": "Data"},
    {"canonical_skill": "MongoDB", "synonyms": ["mongodb", "mongo"], "category": "Data"},
    {"canonical_skill": "Redis", "synonyms": ["redis"], "category": "Data"},
    {"canonical_skill": "Kafka", "synonyms": ["kafka"], "category": "Data"},
    {"canonical_skill": "Spark", "synonyms": ["spark", "pyspark"], "category": "Data"},
    {"canonical_skill": "Machine Learning", "synonyms": ["machine learning", "ml"], "category": "Data"},
    {"canonical_skill": "Data Analysis", "synonyms": ["data analysis", "analytics", "pandas"], "category": "Data"},

    # Infrastructure
    {"canonical_skill": "AWS", "synonyms": ["aws", "amazon web services"], "category": "Cloud"},
    {"canonical_skill": "GCP", "synonyms": ["gcp", "google cloud"], "category": "Cloud"},
    {"canonical_skill": "Azure", "synonyms": ["azure"], "category": "Cloud"},
    {"canonical_skill": "Docker", "synonyms": ["docker", "containers"], "category": "DevOps"},
    {"canonical_skill": "Kubernetes", "synonyms": ["kubernetes", "k8s"], "category": "DevOps"},
    {"canonical_skill": "Terraform", "synonyms": ["terraform"], "category": "DevOps"},
    {"canonical_skill": "CI/CD", "synonyms": ["ci/cd", "github actions", "jenkins"], "category": "DevOps"},

    # Practices & soft skills
    {"canonical_skill": "Agile", "synonyms": ["agile", "scrum"], "category": "Practice"},
    {"canonical_skill": "Leadership", "synonyms": ["leadership", "team lead", "people management"], "category": "Soft Skill"},
    {"canonical_skill": "Communication", "synonyms": ["communication"], "category": "Soft Skill"},
]

TAXONOMY_VERSION = "taxo-v2"
