"""HTTP header names shared by the API middleware and webhook handling."""

REQUEST_ID_HEADER = "X-Request-ID"
WEBHOOK_SIGNATURE_HEADER = "x-webhook-signature"
GATEWAY_HEADER = "x-gateway"
