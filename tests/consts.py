TEST_SUPABASE_URL = "https://supabase.test"
TEST_SUPABASE_KEY = "test-anon-key"
TEST_BUCKET_NAME = "test-bucket"
TEST_S3_BUCKET_NAME = "test-file-relay"

SUPABASE_UPLOAD_PREFIX = f"{TEST_SUPABASE_URL}/storage/v1/object/{TEST_BUCKET_NAME}/"
SUPABASE_PUBLIC_PREFIX = f"{TEST_SUPABASE_URL}/storage/v1/object/public/{TEST_BUCKET_NAME}/"

TEST_FILE_NAME = "photo.jpg"
TEST_FILE_CONTENT = b"\xff\xd8\xff\xe0 not really a jpeg"
TEST_FILE_CONTENT_TYPE = "image/jpeg"

TEST_TEXT_NAME = "notes.txt"
TEST_TEXT_CONTENT = b"Hello, world!"
TEST_TEXT_CONTENT_TYPE = "text/plain"

TEST_SOURCE_URL = "https://cdn.example.com/images/banner.png"
TEST_SOURCE_CONTENT = b"\x89PNG\r\n\x1a\n fake png"
TEST_SOURCE_CONTENT_TYPE = "image/png"

RELAY_ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_BUCKET_NAME",
    "S3_BUCKET_NAME",
    "BASE_URL",
    "VERCEL_URL",
    "REMOTE_STORE_BACKEND",
    "LOG_LEVEL",
    "AWS_ENDPOINT_URL",
]
