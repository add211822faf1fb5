"""Application-wide constants."""

APP_NAME = "sasrotate"

DEFAULT_RESOURCE_GROUPS: list[str] = [
    "rg-csc-dataanalytics-dev-datalh",
    "rg-csc-dataanalytics-qa-datalh",
    "rg-csc-dataanalytics-prod-datalh",
]
DEFAULT_SECRET_PREFIX = "sacsc"

# Environment variable holding a space-separated list of resource groups.
RESOURCE_GROUPS_ENV_VAR = "resource_groups"

KEY_VAULT_RESOURCE_TYPE = "Microsoft.KeyVault/vaults"

# Secret names are <account>[-<container>]-<kind>.
SECRET_NAME_SEPARATOR = "-"

# SAS signing parameters. Every generated token gets the same window and
# the full permission set.
SAS_EXPIRY_DAYS = 3
SAS_EXPIRY_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
SAS_PERMISSIONS = "cdlruwap"
SAS_RESOURCE_TYPES = "sco"
SAS_SERVICES = "bfqt"

ENDPOINT_SUFFIX = "core.windows.net"
CONNECTION_STRING_TEMPLATE = (
    "DefaultEndpointsProtocol=https;AccountName={account};AccountKey={key};"
    "EndpointSuffix=" + ENDPOINT_SUFFIX
)
BLOB_ENDPOINT_TEMPLATE = "https://{account}.blob." + ENDPOINT_SUFFIX + "/"

# Seed data for the in-memory backend: resource group -> vaults and storage
# account keys. The qa group is deliberately absent to exercise the
# "not deployed" path.
MOCK_DATA: dict[str, dict[str, dict]] = {
    "rg-csc-dataanalytics-dev-datalh": {
        "vaults": {
            "kv-csc-datalh-dev": {
                "sacscdnausedlhdevlz-accountKey": "stale",
                "sacscdnausedlhdevlz-accountConnStr": "stale",
                "sacscdnausedlhdevlz-sasToken": "stale",
                "sacscdnausedlhdevlz-sasUri": "stale",
                "sacscdnausedlhdevlz-data-service-sasToken": "stale",
                "sacscdnausedlhdevlz-data-service-sasUri": "stale",
                "sacscdnausedlhdevlz-legacy-pwd": "untouched",
                "sql-admin-password": "untouched",
            },
        },
        "accounts": {
            "sacscdnausedlhdevlz": "ZGV2LWtleS1ub3QtcmVhbA==",
        },
    },
    "rg-csc-dataanalytics-prod-datalh": {
        "vaults": {
            "kv-csc-datalh-prod": {
                "sacscdnausedlhprodlz-accountConnStr": "stale",
                "sacscdnausedlhprodlz-raw-sasUri": "stale",
            },
        },
        "accounts": {
            "sacscdnausedlhprodlz": "cHJvZC1rZXktbm90LXJlYWw=",
        },
    },
}
