import logging
from typing import Dict, Any, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from photon.core.exceptions import StorageError
from photon.services.storage_interface import UploadedContent, generate_unique_filename

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class S3Service:
    """
    S3 Compatible Storage Service (AWS, R2, MinIO).
    Implements StorageInterface. References are folder-prefixed object keys.
    """

    def __init__(
        self,
        bucket_name: str,
        folder: str = "",
        region_name: str = "us-east-1",
        endpoint_url: str = "",
        access_key: str = "",
        secret_key: str = "",
        url_expires_in: int = 0,
        client=None,
    ):
        self.bucket_name = bucket_name
        self.folder = folder
        self.region_name = region_name
        self.endpoint_url = endpoint_url.rstrip("/")
        self.url_expires_in = url_expires_in

        if client is None:
            # Explicit credentials when configured, otherwise boto3's default chain
            # (env vars, shared credentials file, instance role)
            session = boto3.session.Session()
            client = session.client(
                's3',
                endpoint_url=self.endpoint_url or None,
                aws_access_key_id=access_key or None,
                aws_secret_access_key=secret_key or None,
                region_name=region_name,
                config=Config(signature_version='s3v4')
            )
        self.s3_client = client

    def store(self, content: UploadedContent) -> str:
        key = f"{self.folder}{generate_unique_filename(content.filename)}"

        params = {
            "Bucket": self.bucket_name,
            "Key": key,
            "Body": content.stream,
            "ContentType": content.content_type,
        }
        if content.size is not None:
            params["ContentLength"] = content.size

        try:
            self.s3_client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 Upload Error for {key}: {e}")
            raise StorageError(f"Failed to upload image to S3: {e}", reference=key) from e

        logger.info(f"Uploaded {key} to bucket {self.bucket_name}")
        return key

    def delete(self, reference: Optional[str]) -> None:
        if not reference:
            return
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=reference)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in _MISSING_KEY_CODES:
                logger.info(f"S3 object {reference} already gone")
                return
            raise StorageError(f"Failed to delete {reference} from S3: {e}", reference=reference) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to delete {reference} from S3: {e}", reference=reference) from e
        logger.info(f"Deleted {reference} from bucket {self.bucket_name}")

    def url_for(self, reference: str) -> str:
        if self.url_expires_in > 0:
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': reference},
                ExpiresIn=self.url_expires_in
            )
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket_name}/{reference}"
        return f"https://{self.bucket_name}.s3.amazonaws.com/{reference}"

    def list_files(self, prefix: str = "") -> List[Dict[str, Any]]:
        try:
            paginator = self.s3_client.get_paginator('list_objects_v2')
            pages = paginator.paginate(Bucket=self.bucket_name, Prefix=f"{self.folder}{prefix}")

            files = []
            for page in pages:
                for obj in page.get('Contents', []):
                    files.append({
                        "file_id": obj['Key'],
                        "size": obj['Size'],
                        "upload_timestamp": int(obj['LastModified'].timestamp() * 1000)
                    })
            return files
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to list S3 objects: {e}") from e
