"""
Constants and contract values used across the pipecheck codebase.
"""

# Input locations (relative to the current directory)
DEFAULT_WORKFLOW_PATH = ".github/workflows/ci.yml"
DEFAULT_MANIFEST_PATH = "package.json"
DEFAULT_JOB = "build"

# Environment variables overriding the defaults
ENV_PIPECHECK_WORKFLOW = "PIPECHECK_WORKFLOW"
ENV_PIPECHECK_MANIFEST = "PIPECHECK_MANIFEST"
ENV_PIPECHECK_JOB = "PIPECHECK_JOB"

# Step names
STEP_CHECKOUT = "Checkout code"
STEP_SETUP_NODE = "Set up Node.js"
STEP_INSTALL = "Install dependencies"
STEP_TEST = "Run tests"
STEP_BUILD = "Build the app"
STEP_PUBLISH = "Publish the application to JFrog Artifactory"

# Required pipeline order
EXPECTED_STEPS = [
    STEP_CHECKOUT,
    STEP_SETUP_NODE,
    STEP_INSTALL,
    STEP_TEST,
    STEP_BUILD,
    STEP_PUBLISH,
]

# Job configuration
EXPECTED_RUNNER = "ubuntu-latest"
EXPECTED_BRANCH = "main"

# Node.js setup
SETUP_NODE_ACTION = "actions/setup-node@v2"
NODE_VERSION = "20"

# Commands expected in run blocks
INSTALL_COMMAND = "npm install"
TEST_COMMAND = "npm test"
BUILD_COMMAND = "npm run build"

# Artifactory publishing
ARTIFACTORY_ENV_VARS = [
    "ARTIFACTORY_URL",
    "ARTIFACTORY_USERNAME",
    "ARTIFACTORY_API_KEY",
]
PUBLISH_METHOD = "-X PUT"
PUBLISH_LOCAL_ARTIFACT = "./dist/juice-shop.tar.gz"
PUBLISH_REMOTE_ARTIFACT = "juice-shop/latest/juice-shop.tar.gz"

# Manifest scripts
MANIFEST_TEST_SCRIPT = "test"
MANIFEST_BUILD_SCRIPTS = ["build:frontend", "build:server"]
