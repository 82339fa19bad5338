from prometheus_client import Counter

# Prometheus metrics
posts_created_total = Counter('posts_created_total', 'Total number of posts created')
posts_deleted_total = Counter('posts_deleted_total', 'Total number of post delete requests')
store_errors_total = Counter('store_errors_total', 'Store failures surfaced as HTTP 500', ['operation'])
