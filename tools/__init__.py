# Tools package - clients for external capabilities
#
# Subpackages:
# - service_api: Service invocation for delegated hooks
