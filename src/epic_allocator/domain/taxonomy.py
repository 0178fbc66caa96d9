"""Shared category taxonomy for epic classification and expertise detection.

Each category carries two independent marker sets:
- text keywords, matched as literal substrings of an epic's title + description
- file markers (extensions, config-file names, directory fragments), matched
  against the paths a developer touched
"""

from __future__ import annotations

from enum import Enum

GENERAL_DEVELOPMENT = "General Development"


class Category(Enum):
    MOBILE = "Mobile Development"
    FRONTEND = "Frontend Development"
    BACKEND = "Backend Development"
    DEVOPS = "DevOps/Infrastructure"
    DATA_SCIENCE = "Data Science/ML"
    DATABASE = "Database/SQL"
    GAME = "Game Development"
    FULL_STACK = "Full Stack"

    @property
    def keywords(self) -> tuple[str, ...]:
        return _KEYWORDS[self]

    @property
    def extensions(self) -> tuple[str, ...]:
        return _FILE_MARKERS[self][0]

    @property
    def config_files(self) -> tuple[str, ...]:
        return _FILE_MARKERS[self][1]

    @property
    def path_patterns(self) -> tuple[str, ...]:
        return _FILE_MARKERS[self][2]

    @classmethod
    def from_name(cls, name: str) -> Category | None:
        """Look up a category by display name, ignoring case and surrounding space."""
        wanted = name.strip().lower()
        for category in cls:
            if category.value.lower() == wanted:
                return category
        return None


_KEYWORDS: dict[Category, tuple[str, ...]] = {
    Category.MOBILE: (
        "mobile app", "ios", "android", "flutter", "react native",
        "swift", "kotlin", "mobile ui", "app store", "google play",
        "mobile", "smartphone", "tablet",
    ),
    Category.FRONTEND: (
        "web app", "dashboard", "ui", "user interface", "frontend",
        "react", "vue", "angular", "responsive design", "web components",
        "website", "web page", "client-side", "browser",
    ),
    Category.BACKEND: (
        "api", "backend", "server", "microservice", "rest", "graphql",
        "database integration", "authentication", "authorization",
        "server-side", "endpoint", "web service",
    ),
    Category.DEVOPS: (
        "deployment", "ci/cd", "infrastructure", "cloud", "docker",
        "kubernetes", "terraform", "monitoring", "logging", "devops",
        "pipeline", "automation",
    ),
    Category.DATA_SCIENCE: (
        "analytics", "machine learning", "ai", "data processing",
        "prediction", "recommendation", "data pipeline", "ml model",
        "artificial intelligence", "data science", "neural network",
    ),
    Category.DATABASE: (
        "database", "sql", "data model", "schema", "migration",
        "query optimization", "data migration", "database design",
        "nosql", "mongodb", "postgresql", "mysql",
    ),
    Category.GAME: (
        "game", "unity", "unreal", "game engine", "3d", "physics",
        "game mechanics", "gameplay", "gaming",
    ),
    Category.FULL_STACK: (
        "full stack", "end-to-end", "complete system", "fullstack",
    ),
}

# (extensions, config-file markers, path fragments)
_FILE_MARKERS: dict[Category, tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...]]] = {
    Category.MOBILE: (
        ("swift", "kt", "java", "dart", "m", "h", "xib", "storyboard"),
        ("pubspec.yaml", "build.gradle", "Podfile", "AndroidManifest.xml",
         "Info.plist", "app.json"),
        ("ios/", "android/", "lib/", "flutter/"),
    ),
    Category.FRONTEND: (
        ("jsx", "tsx", "vue", "svelte", "html", "css", "scss", "sass", "less"),
        ("package.json", "vite.config", "webpack.config", "next.config",
         "nuxt.config", "tailwind.config", ".babelrc", "tsconfig.json"),
        ("src/components/", "src/pages/", "public/", "styles/", "assets/"),
    ),
    Category.BACKEND: (
        ("py", "rb", "php", "go", "rs", "java", "cs", "ex", "exs"),
        ("requirements.txt", "Gemfile", "composer.json", "go.mod",
         "Cargo.toml", "pom.xml", "build.gradle", "mix.exs"),
        ("api/", "server/", "backend/", "controllers/", "models/", "services/"),
    ),
    Category.DEVOPS: (
        ("yml", "yaml", "tf", "hcl", "sh", "bash", "dockerfile"),
        ("Dockerfile", "docker-compose.yml", ".gitlab-ci.yml", "Jenkinsfile",
         "terraform.tf", "ansible.yml", "kubernetes.yml", "k8s.yml",
         ".github/workflows"),
        (".github/", "deploy/", "infrastructure/", "terraform/", "k8s/", "helm/"),
    ),
    Category.DATA_SCIENCE: (
        ("ipynb", "py", "r", "rmd", "jl"),
        ("requirements.txt", "environment.yml", "setup.py", "pyproject.toml"),
        ("notebooks/", "data/", "models/", "training/", "datasets/"),
    ),
    Category.DATABASE: (
        ("sql", "prisma", "graphql", "gql"),
        ("prisma/schema.prisma", "knexfile.js", "sequelize.config.js",
         "typeorm.config"),
        ("migrations/", "seeds/", "schema/", "database/"),
    ),
    Category.GAME: (
        ("cs", "cpp", "c", "lua", "gd", "gdscript"),
        ("project.godot", "*.uproject", "*.unity"),
        ("Assets/", "Scripts/", "Scenes/", "Prefabs/"),
    ),
    # Full Stack is inferred from breadth, never from individual files
    Category.FULL_STACK: ((), (), ()),
}
