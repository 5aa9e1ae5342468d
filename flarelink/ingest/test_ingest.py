#!/usr/bin/env python3
"""
Tests for the CSV readers.

Writes small CSV files to a temporary directory and checks parsing rules.
"""

import tempfile
from pathlib import Path

import pytest

from flarelink.constants import VOLUME_POLICY_SKIP
from flarelink.ingest import ViirsReader, WorldBankReader, filter_by_country

WORLD_BANK_CSV = """COUNTRY,Latitude,Longitude,bcm,MMscfd,Year,Field Type,Location,Flare Level,Flaring Vol (million m3)
Algeria,31.67,6.07,0.01,1.2,2019,Oil,Onshore,Upstream,12.5
Algeria, 31.68, 6.08,0.02,1.3,2018,Oil,Onshore,Upstream, 7.25
Algeria,not-a-lat,6.09,0.02,1.3,2019,Oil,Onshore,Upstream,3.0
Algeria,31.69,6.10,0.02,1.3,2019,Oil,Onshore,Upstream,n/a
Algeria,31.70,6.11,short,row
LIBYA,27.5,19.2,0.1,9.6,2019,Gas,Onshore,Upstream,99.0
Algeria,nan,6.12,0.02,1.3,2019,Oil,Onshore,Upstream,1.0
"""

VIIRS_CSV = """cntry_name,cntry_iso,catalog_id,id_number,latitude,longitude,flr_volume,avg_temp,ellip,dtc_freq,clr_obs,flr_type
Algeria,DZA,VNF_e2015_001,1,31.671,6.071,0.35,1750,0.3,0.8,120,upstream
Algeria,DZA,VNF_e2015_002,2,31.9,xx,0.20,1700,0.2,0.5,100,upstream
Algeria,DZA,VNF_e2015_003,3,32.0,6.5,,1650,0.1,0.4,90,downstream
Libya,LBY,VNF_e2015_004,4,27.5,19.2,1.10,1800,0.4,0.9,130,upstream
Libya,LBY,VNF_e2015_005,5,27.6
"""


def write_csv(tmpdir: Path, name: str, text: str) -> Path:
    path = tmpdir / name
    path.write_text(text, encoding='utf-8')
    return path


def test_world_bank_parsing():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_csv(Path(tmpdir), 'wb.csv', WORLD_BANK_CSV)
        reader = WorldBankReader(path)
        records = reader.read()

    # bad latitude, short row and NaN latitude are skipped
    assert len(records) == 4
    assert reader.rows_read == 7
    assert reader.rows_skipped == 3

    first = records[0]
    assert first.country == 'Algeria'
    assert first.latitude == 31.67
    assert first.longitude == 6.07
    assert first.year == '2019'
    assert first.flaring_volume == 12.5
    assert first.field_type == 'Oil'
    assert first.flare_level == 'Upstream'

    # leading spaces trimmed
    assert records[1].latitude == 31.68
    assert records[1].flaring_volume == 7.25
    print(f"  ✓ {len(records)} World Bank records parsed, {reader.rows_skipped} skipped")


def test_unparsable_volume_defaults_to_zero():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_csv(Path(tmpdir), 'wb.csv', WORLD_BANK_CSV)
        reader = WorldBankReader(path)
        records = reader.read()

    defaulted = [r for r in records if r.latitude == 31.69]
    assert len(defaulted) == 1
    assert defaulted[0].flaring_volume == 0.0
    assert reader.volumes_defaulted == 1


def test_unparsable_volume_skip_policy():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_csv(Path(tmpdir), 'wb.csv', WORLD_BANK_CSV)
        reader = WorldBankReader(path, invalid_volume=VOLUME_POLICY_SKIP)
        records = reader.read()

    assert len(records) == 3
    assert all(r.latitude != 31.69 for r in records)
    assert reader.volumes_defaulted == 0
    assert reader.stats()['rows_skipped'] == 4


def test_viirs_parsing():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = write_csv(Path(tmpdir), 'viirs.csv', VIIRS_CSV)
        reader = ViirsReader(path)
        records = reader.read()

    assert [r.catalog_id for r in records] == ['VNF_e2015_001', 'VNF_e2015_003', 'VNF_e2015_004']
    first = records[0]
    assert first.country_name == 'Algeria'
    assert first.country_iso == 'DZA'
    assert first.latitude == 31.671
    assert first.flare_volume == 0.35
    assert first.avg_temp == '1750'
    assert first.clear_observations == '120'
    assert first.flare_type == 'upstream'

    # empty volume defaults to zero
    assert records[1].flare_volume == 0.0
    assert reader.rows_skipped == 2


def test_invalid_utf8_bytes_do_not_abort_read():
    data = (VIIRS_CSV.splitlines()[0] + '\n'
            + 'Algeria,DZA,VNF_e2015_001,1,31.671,6.071,0.35,1750,0.3,0.8,120,upstream\n').encode('utf-8')
    data += b'Alg\xe9rie,DZA,VNF_e2015_002,2,31.9,6.2,0.20,1700,0.2,0.5,100,upstream\n'

    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / 'viirs.csv'
        path.write_bytes(data)
        reader = ViirsReader(path)
        records = reader.read()

    assert len(records) == 2
    assert reader.rows_skipped == 0
    assert records[1].country_name == 'Alg\ufffdrie'
    assert records[1].latitude == 31.9
    assert records[1].flare_volume == 0.2


def test_missing_file_raises():
    with tempfile.TemporaryDirectory() as tmpdir:
        reader = WorldBankReader(Path(tmpdir) / 'missing.csv')
        with pytest.raises(FileNotFoundError):
            reader.read()


def test_unknown_policy_rejected():
    with pytest.raises(ValueError):
        ViirsReader(Path('viirs.csv'), invalid_volume='mean')


def test_filter_by_country_case_insensitive():
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir = Path(tmpdir)
        wb = WorldBankReader(write_csv(tmpdir, 'wb.csv', WORLD_BANK_CSV)).read()
        viirs = ViirsReader(write_csv(tmpdir, 'viirs.csv', VIIRS_CSV)).read()

    assert len(filter_by_country(wb, 'algeria')) == 3
    assert len(filter_by_country(wb, 'Libya')) == 1
    assert len(filter_by_country(viirs, 'LIBYA', attr='country_name')) == 1
    assert filter_by_country(wb, None) == wb
    assert filter_by_country(wb, 'Norway') == []


if __name__ == '__main__':
    test_world_bank_parsing()
    test_unparsable_volume_defaults_to_zero()
    test_unparsable_volume_skip_policy()
    test_viirs_parsing()
    test_invalid_utf8_bytes_do_not_abort_read()
    test_missing_file_raises()
    test_unknown_policy_rejected()
    test_filter_by_country_case_insensitive()
    print("\n✓ All ingest tests passed!")
