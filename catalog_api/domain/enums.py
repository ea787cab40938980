# catalog_api/domain/enums.py
import enum


class DatabaseProvider(str, enum.Enum):
    sqlserver = "sqlserver"
    mysql = "mysql"
    postgresql = "postgresql"
    sqlite = "sqlite"

    @classmethod
    def parse(cls, value: "str | DatabaseProvider") -> "DatabaseProvider | None":
        """Resolve a configured provider name, ignoring case and common aliases."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower().replace("_", "").replace("-", "")
        return _ALIASES.get(key)


_ALIASES = {
    "sqlserver": DatabaseProvider.sqlserver,
    "mssql": DatabaseProvider.sqlserver,
    "mysql": DatabaseProvider.mysql,
    "postgresql": DatabaseProvider.postgresql,
    "postgres": DatabaseProvider.postgresql,
    "npgsql": DatabaseProvider.postgresql,
    "sqlite": DatabaseProvider.sqlite,
}
