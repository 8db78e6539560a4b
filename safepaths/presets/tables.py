"""Directory layouts for the bundled framework presets.

Each table maps a symbolic name to a suffix relative to the base directory;
``""`` stands for the base directory itself.
"""

COMMON_PATHS = {
    "base": "",
    "vendor": "vendor",
    "public": "public",
    "tests": "tests",
    "docs": "docs",
}

LARAVEL_PATHS = {
    **COMMON_PATHS,
    "app": "app",
    "bootstrap": "bootstrap",
    "config": "config",
    "database": "database",
    "resources": "resources",
    "routes": "routes",
    "storage": "storage",
    "controllers": "app/Http/Controllers",
    "middleware": "app/Http/Middleware",
    "models": "app/Models",
    "providers": "app/Providers",
    "console": "app/Console",
    "exceptions": "app/Exceptions",
    "jobs": "app/Jobs",
    "listeners": "app/Listeners",
    "mail": "app/Mail",
    "notifications": "app/Notifications",
    "policies": "app/Policies",
    "rules": "app/Rules",
    "views": "resources/views",
    "lang": "resources/lang",
    "css": "resources/css",
    "js": "resources/js",
    "sass": "resources/sass",
    "logs": "storage/logs",
    "cache": "storage/framework/cache",
    "sessions": "storage/framework/sessions",
    "uploads": "storage/app/public",
    "private_storage": "storage/app",
    "migrations": "database/migrations",
    "seeders": "database/seeders",
    "factories": "database/factories",
    "assets": "public/assets",
    "images": "public/images",
    "build": "public/build",
    "bootstrap_cache": "bootstrap/cache",
}

SLIM4_PATHS = {
    **COMMON_PATHS,
    "src": "src",
    "config": "config",
    "templates": "templates",
    "var": "var",
    "bin": "bin",
    "actions": "src/Action",
    "handlers": "src/Handler",
    "middleware": "src/Middleware",
    "services": "src/Service",
    "repositories": "src/Repository",
    "entities": "src/Entity",
    "factories": "src/Factory",
    "exceptions": "src/Exception",
    "views": "templates",
    "layouts": "templates/layout",
    "partials": "templates/partial",
    "cache": "var/cache",
    "logs": "var/log",
    "storage": "var/storage",
    "uploads": "var/uploads",
    "tmp": "var/tmp",
    "assets": "public/assets",
    "css": "public/assets/css",
    "js": "public/assets/js",
    "images": "public/assets/images",
    "fonts": "public/assets/fonts",
    "routes": "config/routes",
    "settings": "config/settings",
    "dependencies": "config/dependencies",
}

MEZZIO_PATHS = {
    **COMMON_PATHS,
    "src": "src",
    "config": "config",
    "templates": "templates",
    "data": "data",
    "modules": "modules",
    "bin": "bin",
    "handlers": "src/Handler",
    "middleware": "src/Middleware",
    "services": "src/Service",
    "factories": "src/Factory",
    "entities": "src/Entity",
    "repositories": "src/Repository",
    "views": "templates",
    "layouts": "templates/layout",
    "app_templates": "templates/app",
    "error_templates": "templates/error",
    "cache": "data/cache",
    "logs": "data/logs",
    "storage": "data/storage",
    "uploads": "data/uploads",
    "database": "data/database",
    "autoload": "config/autoload",
    "routes": "config/routes",
    "assets": "public/assets",
    "css": "public/assets/css",
    "js": "public/assets/js",
    "images": "public/assets/images",
    "fonts": "public/assets/fonts",
    "app_module": "modules/App",
    "user_module": "modules/User",
    "admin_module": "modules/Admin",
    "content": "content",
    "pages": "content/pages",
    "posts": "content/posts",
    "docs": "content/docs",
}

# name -> (title, description, table)
BUNDLED_PRESETS = {
    "laravel": (
        "Laravel",
        "Laravel Framework directory structure with app, resources, storage, "
        "and database directories",
        LARAVEL_PATHS,
    ),
    "slim4": (
        "Slim 4",
        "Slim 4 Framework directory structure with src, templates, var, "
        "and config directories",
        SLIM4_PATHS,
    ),
    "mezzio": (
        "Mezzio",
        "Mezzio (Laminas) directory structure with modules, data, "
        "and content directories",
        MEZZIO_PATHS,
    ),
    "laminas": (
        "Mezzio",
        "Alias of the Mezzio preset",
        MEZZIO_PATHS,
    ),
}
