"""預設設定值。"""

DEFAULT_CONFIG = {
    "export": {
        "property_name": "",
        "source_folder": "media",
        "target_folder": "",
        "create_subfolders": False,
        "export_json": False,
        "export_mets": False,
        "use_scp": False,
        "page_number_type": "physPageNumber",
        "manifest_file_name": "selected.json",
        "mets_file_name": "mets.xml",
    },
    "scp": {
        "hostname": "",
        "port": 22,
        "login": "",
        "password": "",
        "known_hosts": "",
        "timeout_sec": 30.0,
        "chunk_size_kb": 16,
    },
    "json_format": {
        "images": "",
        "herisId": "",
        "idName": "",
        "title": "",
        "altText": "",
        "symbolImage": "",
        "mediaType": "",
        "creationDate": "",
        "copyRightBDA": "",
        "fileInformation": "",
        "publishable": "",
        "migratedInformation": "",
        "true_token": "ja",
        "false_token": "nein",
        "token_fields": ["copyRightBDA", "publishable"],
    },
    "manifest": {
        "collection_id": 0,
        "creation_date_source": "file",
        "symbol_image": True,
        "copyright_flag": True,
        "publishable": True,
    },
    "projects": {},
}
