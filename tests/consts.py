"""Constants shared by the test suite."""

TEST_REGION = "us-east-1"
TEST_BUCKET_NAME = "test-file-management-bucket"
TEST_TABLE_NAME = "test-file-metadata"

TEST_USER_ID = "test-user"
OTHER_USER_ID = "other-user"

TEST_PDF_NAME = "floor plan.pdf"
TEST_PDF_CONTENT = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<</Root 1 0 R>>\n%%EOF"
TEST_PDF_CONTENT_TYPE = "application/pdf"
