APP_NAME = "soyloader"

# Loader option defaults
DEFAULT_SRC_GLOB = "src/**/*.soy"
DEFAULT_DEPS_GLOB = "node_modules/metal*/src/**/*.soy"

# Durable cache layout
CACHE_DIR_NAME = ".soycache"
SOURCE_DIR_NAME = "src"
COMPILED_SUFFIX = ".js"
HASH_SUFFIX = ".hash"
LOCK_SUFFIX = ".lock"

# Bundlers wrap templates under a synthetic module name, e.g. foo.soy.js
MODULE_SUFFIX = ".js"

CONFIG_FILE_NAMES = ("soyloader.yaml", "soyloader.yml", ".soyloader.yaml")

# Placeholders understood by the command compiler
SRC_PLACEHOLDER = "{src}"
DEPS_PLACEHOLDER = "{deps}"
OUTPUT_PLACEHOLDER = "{output}"
