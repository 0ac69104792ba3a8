# 🔹 Status do gateway que encerram o ciclo de vida (mapeados 1:1)
GATEWAY_TERMINAL_STATUSES = ("PAID", "ERROR", "EXPIRED")

# 🔹 Endpoints do gateway Pagou (relativos a PAGOU_API_URL)
PAGOU_CREATE_PATH = "/pix/v1/payment"
PAGOU_TRANSACTION_PATH = "/pix/v1/transactions"

# 🔹 Timeout para o gateway (em segundos)
GATEWAY_TIMEOUT = 30

# 🔹 Validade da cobrança PIX (em segundos), independente do contador exibido
PIX_EXPIRATION_SECONDS = 86400  # 24 horas

# 🔹 Intervalos dos timers da página de pagamento (em segundos)
STATUS_POLL_INTERVAL = 5
COUNTDOWN_INTERVAL = 1

# 🔹 Regras de frete do checkout
FREE_SHIPPING_THRESHOLD = "299.00"
SHIPPING_COST = "19.90"

# 🔹 Navegação do fluxo de checkout
CHECKOUT_PATH = "/checkout"
PAYMENT_PAGE_PATH = "/checkout/pagamento"
HOME_PATH = "/"

# 🔹 Mensagens de erro expostas pela API
MSG_NOT_CONFIGURED = "Payment service is not configured"
MSG_TRANSACTION_ID_REQUIRED = "Transaction ID is required"
MSG_CREATE_FAILED = "Payment failed with status {status}"
MSG_STATUS_FAILED = "Failed to check payment status"
MSG_INVALID_RESPONSE = "Invalid response from payment service: {body}"
MSG_NETWORK_ERROR = "Internal server error"
