import boto3


class S3Client:
    """Thin wrapper around a boto3 S3 client bound to one public bucket."""

    def __init__(self):
        self.client = None
        self.bucket = None
        self.public_url = ''

    def init_app(self, app):
        self.client = boto3.client(
            's3',
            endpoint_url=app.config.get('S3_ENDPOINT_URL'),
            aws_access_key_id=app.config['AWS_ACCESS_KEY_ID'],
            aws_secret_access_key=app.config['AWS_SECRET_ACCESS_KEY'],
            region_name=app.config['AWS_REGION']
        )
        self.bucket = app.config['S3_BUCKET']
        self.public_url = (app.config.get('S3_PUBLIC_URL') or '').rstrip('/')

    def upload(self, key, body, content_type):
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=body,
            ContentType=content_type
        )
        return self.url_for(key)

    def url_for(self, key):
        return f"{self.public_url}/{self.bucket}/{key}"

    def delete(self, file_url):
        # Public URLs look like .../<bucket>/<key>
        marker = f"/{self.bucket}/"
        if marker not in file_url:
            return
        key = file_url.split(marker, 1)[1]
        self.client.delete_object(Bucket=self.bucket, Key=key)
