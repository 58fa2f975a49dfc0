"""
Tests for the dataset app - sample store, CSV import/export and statistics.
"""
import pytest
import numpy as np
import os
import sys
import json

# Setup Django
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'regression_lab'))

import django
django.setup()

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client
from dataset_app.services import DatasetStore, NO_DATA, parse_number
from shared.utils.exceptions import ValidationError, EmptyDatasetError
from workbench.state import reset_app_state


@pytest.fixture
def store():
    return DatasetStore()


@pytest.fixture
def filled_store(store):
    store.add(1, 2, 3)
    store.add('4', '5', '6')
    store.add(-1.5, 0, 2.25)
    return store


class TestDatasetStore:
    """Tests for adding, clearing and reading samples."""

    def test_add_appends_in_order(self, store):
        """Samples keep insertion order and parse numeric strings."""
        store.add(1, 2, 3)
        store.add('4.5', ' -1 ', '0')

        samples = store.samples()
        assert store.count() == 2
        assert len(store) == 2
        assert samples[0].to_dict() == {'input1': 1.0, 'input2': 2.0, 'output': 3.0}
        assert samples[1].inputs == (4.5, -1.0)
        assert samples[1].output == 0.0

    @pytest.mark.parametrize('bad', ['', '   ', 'abc', '3abc', 'nan', 'inf', '-Infinity', None, True])
    def test_add_rejects_non_finite_numbers(self, filled_store, bad):
        """Invalid values raise and leave the dataset unchanged."""
        before = filled_store.samples()

        with pytest.raises(ValidationError):
            filled_store.add(1, bad, 3)

        assert filled_store.samples() == before

    def test_duplicates_allowed(self, store):
        store.add(1, 1, 1)
        store.add(1, 1, 1)
        assert store.count() == 2

    def test_clear(self, filled_store):
        filled_store.clear()

        assert filled_store.count() == 0
        assert filled_store.samples() == ()
        assert filled_store.stats() == NO_DATA

    def test_snapshot_unaffected_by_later_changes(self, filled_store):
        """A snapshot taken earlier does not see later additions or a clear."""
        snapshot = filled_store.samples()
        filled_store.add(9, 9, 9)
        filled_store.clear()

        assert len(snapshot) == 3
        assert snapshot[0].output == 3.0

    def test_change_signal(self, store):
        """Every successful mutation notifies subscribers once."""
        calls = []
        store.subscribe(lambda: calls.append(store.count()))

        store.add(1, 2, 3)
        with pytest.raises(ValidationError):
            store.add('x', 2, 3)
        store.import_csv("input1,input2,output\n1,1,1\n2,2,2\n")
        store.import_csv("input1,input2,output\nbad,row\n")
        store.clear()

        assert calls == [1, 3, 0]

    def test_to_dataframe(self, filled_store):
        df = filled_store.to_dataframe()

        assert list(df.columns) == ['input1', 'input2', 'output']
        assert len(df) == 3
        assert df['output'].tolist() == [3.0, 6.0, 2.25]
        assert df.dtypes.apply(lambda d: d == np.float64).all()

    def test_to_dataframe_empty(self, store):
        df = store.to_dataframe()
        assert list(df.columns) == ['input1', 'input2', 'output']
        assert len(df) == 0


class TestCsv:
    """Tests for CSV import and export."""

    def test_import_counts_added_and_skipped(self, store):
        """Valid rows are added, short and non-numeric rows are skipped."""
        text = "input1,input2,output\n1,2,3\n4,5,6\n7,8\nx,1,2\n0.5,-1,2\n"

        result = store.import_csv(text)

        assert result.added == 3
        assert result.skipped == 2
        assert [s.output for s in store.samples()] == [3.0, 6.0, 2.0]

    def test_import_appends_to_existing(self, filled_store):
        filled_store.import_csv("a,b,c\n10,20,30\n")

        assert filled_store.count() == 4
        assert filled_store.samples()[-1].to_dict() == {'input1': 10.0, 'input2': 20.0, 'output': 30.0}

    def test_header_is_not_inspected(self, store):
        """The first line is skipped even if it holds numbers."""
        result = store.import_csv("1,2,3\n4,5,6")

        assert result.added == 1
        assert store.samples()[0].input1 == 4.0

    def test_blank_lines_and_extra_fields(self, store):
        result = store.import_csv("input1,input2,output\n\n1,2,3,extra\n   \n4,5,6\n")

        assert result.added == 2
        assert result.skipped == 0
        assert store.samples()[0].output == 3.0

    @pytest.mark.parametrize('text', ['', 'input1,input2,output', 'input1,input2,output\n'])
    def test_empty_imports_nothing(self, store, text):
        result = store.import_csv(text)
        assert (result.added, result.skipped) == (0, 0)
        assert store.count() == 0

    def test_export_format(self, store):
        store.add(1, 2, 3)
        store.add(0.1, -2.5, 100)

        text = store.export_csv()

        lines = text.split('\n')
        assert lines[0] == 'input1,input2,output'
        assert len(lines) == 4
        assert lines[-1] == ''
        assert [float(v) for v in lines[2].split(',')] == [0.1, -2.5, 100.0]

    def test_export_empty(self, store):
        assert store.export_csv() == 'input1,input2,output\n'

    def test_export_then_import_reproduces_dataset(self, store):
        """Export composed with import into a fresh store keeps values and order."""
        rng = np.random.default_rng(7)
        for a, b, c in rng.normal(size=(25, 3)) * 1e3:
            store.add(a, b, c)
        store.add(1e-300, -0.0, 123456789.123456789)

        fresh = DatasetStore()
        result = fresh.import_csv(store.export_csv())

        assert result.added == 26
        assert result.skipped == 0
        assert fresh.samples() == store.samples()


class TestStats:
    """Tests for output statistics and the input1 domain."""

    def test_mean_and_population_std(self, store):
        for output in [2, 4, 6]:
            store.add(0, 0, output)

        stats = store.stats()

        assert stats.count == 3
        assert stats.has_data
        assert stats.mean_output == pytest.approx(4.0)
        assert stats.std_output == pytest.approx(np.sqrt(8 / 3))

    def test_single_sample_std_zero(self, store):
        store.add(1, 1, 5)
        assert store.stats().std_output == 0.0

    def test_empty_is_no_data(self, store):
        stats = store.stats()

        assert stats is NO_DATA
        assert not stats.has_data
        assert stats.to_dict() == {'count': 0, 'mean_output': None, 'std_output': None}

    def test_input1_domain(self, filled_store):
        assert filled_store.min_input1() == -1.5
        assert filled_store.max_input1() == 4.0

    def test_input1_domain_empty(self, store):
        with pytest.raises(EmptyDatasetError):
            store.min_input1()
        with pytest.raises(EmptyDatasetError):
            store.max_input1()


def test_parse_number():
    assert parse_number(' 2.5 ') == 2.5
    assert parse_number(3) == 3.0
    with pytest.raises(ValidationError, match='input2'):
        parse_number('', 'input2')


@pytest.mark.django_db
class TestDatasetViews:
    """Tests for the dataset form actions and JSON API."""

    @pytest.fixture(autouse=True)
    def fresh_state(self):
        self.state = reset_app_state()
        yield
        self.state.shutdown(wait=False)

    def test_add_form(self):
        client = Client()
        response = client.post('/add/', {'input1': '1', 'input2': '2', 'output': '3'})

        assert response.status_code == 302
        assert self.state.store.count() == 1

    def test_add_form_invalid(self):
        client = Client()
        response = client.post('/add/', {'input1': '1', 'input2': '', 'output': '3'}, follow=True)

        assert self.state.store.count() == 0
        assert 'Please enter valid numbers.' in response.content.decode()

    def test_add_requires_post(self):
        assert Client().get('/add/').status_code == 405

    def test_import_and_export(self):
        client = Client()
        upload = SimpleUploadedFile(
            'data.csv', b'input1,input2,output\n1,2,3\n4,5\n6,7,8\n', content_type='text/csv'
        )
        client.post('/import/', {'file': upload})

        assert self.state.store.count() == 2

        response = client.get('/export/')
        assert response['Content-Type'] == 'text/csv'
        assert 'filename="dataset.csv"' in response['Content-Disposition']
        assert response.content.decode().startswith('input1,input2,output\n')

    def test_clear(self):
        self.state.store.add(1, 2, 3)
        Client().post('/clear/')
        assert self.state.store.count() == 0

    def test_api_samples(self):
        client = Client()
        response = client.post(
            '/api/samples/',
            data=json.dumps({'input1': 1, 'input2': 2, 'output': 3}),
            content_type='application/json',
        )
        assert response.status_code == 200
        assert response.json()['count'] == 1

        response = client.post(
            '/api/samples/',
            data=json.dumps({'input1': 'x', 'input2': 2, 'output': 3}),
            content_type='application/json',
        )
        assert response.status_code == 400

        response = client.get('/api/samples/')
        assert response.json()['samples'] == [{'input1': 1.0, 'input2': 2.0, 'output': 3.0}]

    def test_api_samples_undecodable_body(self):
        response = Client().post('/api/samples/', data=b'\xff\xfe{', content_type='application/json')

        assert response.status_code == 400
        assert response.json()['status'] == 'error'
        assert self.state.store.count() == 0

    def test_api_stats(self):
        self.state.store.add(0, 0, 2)
        self.state.store.add(0, 0, 4)

        data = Client().get('/api/stats/').json()

        assert data == {'count': 2, 'mean_output': 3.0, 'std_output': 1.0}
