# Константы для снапшотов и доступа к файлам

# Имя каталога хранилища снапшотов внутри выбранного репозитория
SNAPSHOT_DIR_NAME = ".snapshotstore"

# Собственный каталог метаданных VCS
VCS_METADATA_DIR = ".git"

# Каталоги, которые никогда не копируются в хранилище
RESERVED_CONTROL_DIRS = frozenset({VCS_METADATA_DIR, SNAPSHOT_DIR_NAME})

# Файлы и каталоги с этим префиксом скрыты из списка файлов
HIDDEN_PREFIX = "."
